# -*- coding: utf-8 -*-
"""
CLI验证器模块
"""

from pathlib import Path
from typing import List, Optional

from ..presenter import SORT_FIELDS

VALID_OUTPUT_FORMATS = ('json', 'xlsx', 'json,xlsx')


def validate_output_format(output_format: str) -> List[str]:
    """
    验证输出格式

    Args:
        output_format: 逗号分隔的格式字符串

    Returns:
        List[str]: 格式列表

    Raises:
        ValueError: 如果格式不合法
    """
    if not output_format or not output_format.strip():
        return []

    formats = [fmt.strip() for fmt in output_format.split(',')]
    for fmt in formats:
        if fmt not in ('json', 'xlsx'):
            raise ValueError(f"不支持的输出格式: {fmt}。支持的格式: json, xlsx")

    if len(formats) != len(set(formats)):
        raise ValueError("输出格式不能重复")

    return formats


def validate_sort_field(sort_by: str) -> str:
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"不支持的排序字段: {sort_by}。支持的字段: {', '.join(SORT_FIELDS)}")
    return sort_by


def validate_percent(value: Optional[float], name: str) -> Optional[float]:
    """验证归一化位置在 [0, 1] 内"""
    if value is None:
        return None
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} 必须在 [0, 1] 范围内: {value}")
    return value


def validate_window_options(left: Optional[float], right: Optional[float]) -> None:
    """
    验证窗口选项

    Raises:
        ValueError: 如果选项组合不合法
    """
    validate_percent(left, '--left')
    validate_percent(right, '--right')
    if left is not None and right is not None and left > right:
        raise ValueError("--left 不能大于 --right")


def validate_file(file_path: str) -> bool:
    """验证文件是否存在且为 JSON 格式"""
    path = Path(file_path)
    if not path.exists():
        print(f"错误: 文件不存在: {file_path}")
        return False

    suffixes = [s.lower() for s in path.suffixes]
    if not suffixes or suffixes[0] not in ('.json', '.jsonl'):
        print(f"警告: 文件可能不是 JSON 格式: {file_path}")

    return True
