"""
CLI命令模块
"""

from .summary import SummaryCommand
from .tree import TreeCommand
from .window import WindowCommand
from .convert import ConvertCommand

__all__ = ['SummaryCommand', 'TreeCommand', 'WindowCommand', 'ConvertCommand']
