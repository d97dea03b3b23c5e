"""Infrastructure: storage backends, Redis counter store."""
