"""Supabase infrastructure module"""
from .client import get_supabase_client
from .repositories import RepositoryFactory

__all__ = ['get_supabase_client', 'RepositoryFactory']
