"""Cross-cutting helpers shared by every layer (no business logic)."""
