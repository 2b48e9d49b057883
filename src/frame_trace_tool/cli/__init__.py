# -*- coding: utf-8 -*-
"""
CLI模块 - 命令行接口
"""

from .main import main
from .commands import SummaryCommand, TreeCommand, WindowCommand, ConvertCommand

__all__ = ['main', 'SummaryCommand', 'TreeCommand', 'WindowCommand', 'ConvertCommand']
