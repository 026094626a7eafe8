from .table import binding_table

__all__ = ["binding_table"]
