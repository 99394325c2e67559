"""Infrastructure: storage backends (Firestore REST, in-memory)."""
