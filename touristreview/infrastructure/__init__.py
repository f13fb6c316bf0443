"""Infrastructure: Firestore, object storage and the map search gateway."""
