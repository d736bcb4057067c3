"""Query dispatch, model backends and conversation memory."""
