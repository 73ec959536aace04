"""episode-sync: keeps a local episode library in step with TheTVDB."""
