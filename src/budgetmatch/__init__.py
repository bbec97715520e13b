"""Budgetmatch - budget planning with transaction-to-budget matching."""

__version__ = "0.1.0"


# Import main lazily so importing the package does not load the CLI
def __getattr__(name):
    if name == "main":
        from budgetmatch.cli.main import main
        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
