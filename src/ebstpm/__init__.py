"""ebstpm - TPM/secureboot post-processor for amazon-ebs AMIs."""

__version__ = "1.0.0"
