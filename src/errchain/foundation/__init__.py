"""Foundation layer: configuration, call-site capture, codes and the chain model."""
