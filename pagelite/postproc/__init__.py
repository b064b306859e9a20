"""Post-processing of rendered markup."""
