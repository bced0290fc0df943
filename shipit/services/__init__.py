"""Release services: build and deploy orchestration."""
