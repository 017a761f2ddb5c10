from .strategy_factory import DatabaseConnectionFactory

__all__ = ['DatabaseConnectionFactory']
