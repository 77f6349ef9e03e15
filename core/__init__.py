"""BlogForge core - domain, application services, infrastructure and settings."""
