"""Infrastructure layer: Firestore REST transport and wire formats."""
