"""aiql/deployment: HTTP serving for the reasoning core."""
