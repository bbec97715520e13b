"""Domain layer for budgetmatch.

Services are imported from their own modules (``budgetmatch.domain.matching``
and friends) so that the database layer can import entities without pulling
in the services that depend on it.
"""
