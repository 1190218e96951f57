"""
Utility modules for formflow
"""
from .config_loader import FormFlowConfig, load_formflow_config

__all__ = [
    'FormFlowConfig',
    'load_formflow_config',
]
