"""Monthly asset returns, summaries by regime, and the Welch two-sample test."""
