"""studydeck: spaced-repetition flashcard learning API."""
