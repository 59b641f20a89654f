"""Result entry pipeline: classification, collection, drafts, roster and compilation."""
