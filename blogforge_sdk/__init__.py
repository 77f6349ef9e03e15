"""BlogForge SDK - clients for the VPS, WordPress REST API and Claude batch API."""
