"""Memory core: lanes, budget, summarization, persona, rendering."""
