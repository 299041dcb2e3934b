"""
Ad Generation Pipeline

  Prompts    — Facets → deterministic scene prompts → four-scene storyboard
  Dispatch   — Ordered provider fallback with a simulated result as last resort
  Operations — Polling of asynchronous provider jobs to a terminal state
"""
