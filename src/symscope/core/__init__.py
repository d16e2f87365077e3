"""Hash-consed trees, expressions, evaluation and pattern matching."""
