"""filestash: key-addressed file storage service."""
