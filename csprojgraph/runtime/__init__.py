"""Resolution runtime: configuration loading, runtime selection and the end-to-end pass."""
