"""
工具模块
"""

from .search import binary_search, find_first_visible, iter_visible_frames
from .tree_utils import get_call_stack, walk_frames, print_call_stack_tree, get_tree_statistics

__all__ = [
    'binary_search',
    'find_first_visible',
    'iter_visible_frames',
    'get_call_stack',
    'walk_frames',
    'print_call_stack_tree',
    'get_tree_statistics',
]
