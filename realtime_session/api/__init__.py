"""HTTP surface: request/response models and the session route."""
