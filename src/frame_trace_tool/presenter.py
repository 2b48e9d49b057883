# -*- coding: utf-8 -*-
"""
函数统计展示：生成表格行、JSON/XLSX 文件和 markdown 表格
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

logger = logging.getLogger(__name__)

SORT_FIELDS = ('self_time', 'total_time', 'count', 'name', 'id')


def build_function_rows(trace, sort_by: str = 'self_time') -> List[Dict[str, Any]]:
    """
    生成每个函数一行的统计数据

    Args:
        trace: Trace
        sort_by: 排序字段，数值字段降序，name/id 升序

    Returns:
        List[Dict[str, Any]]: 数据行列表
    """
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"不支持的排序字段: {sort_by}。支持的字段: {', '.join(SORT_FIELDS)}")

    rows = []
    for record in trace.functions:
        total_time = record.total_time or 0
        self_time = record.self_time or 0
        rows.append({
            'id': record.id,
            'name': record.name or '(anonymous)',
            'location': json.dumps(record.location, ensure_ascii=False, default=str),
            'count': record.count,
            'total_time': total_time,
            'self_time': self_time,
            'avg_time': total_time / record.count if record.count else 0,
            'self_ratio': self_time / total_time if total_time else 0,
        })

    reverse = sort_by not in ('name', 'id')
    rows.sort(key=lambda row: (row[sort_by], -row['id'] if reverse else row['id']), reverse=reverse)
    return rows


def functions_dataframe(trace, sort_by: str = 'self_time') -> pd.DataFrame:
    """函数统计的 DataFrame"""
    return pd.DataFrame(build_function_rows(trace, sort_by),
                        columns=['id', 'name', 'location', 'count', 'total_time',
                                 'self_time', 'avg_time', 'self_ratio'])


def generate_output_files(rows: List[Dict[str, Any]], output_dir: str, base_name: str,
                          output_format: str = 'json,xlsx') -> List[Path]:
    """
    生成输出文件（JSON 和 XLSX）

    Args:
        rows: 数据行列表
        output_dir: 输出目录
        base_name: 基础文件名
        output_format: json、xlsx 或 json,xlsx

    Returns:
        List[Path]: 生成的文件路径列表
    """
    formats = {fmt.strip() for fmt in output_format.split(',') if fmt.strip()}

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    generated_files = []

    if 'json' in formats:
        json_file = output_path / f"{base_name}.json"
        with open(json_file, 'w', encoding='utf-8') as f:
            json.dump(rows, f, indent=2, ensure_ascii=False)
        print(f"JSON 文件已生成: {json_file}")
        generated_files.append(json_file)

    if 'xlsx' in formats:
        if rows:
            df = pd.DataFrame(rows)
            xlsx_file = output_path / f"{base_name}.xlsx"
            df.to_excel(xlsx_file, index=False)
            print(f"Excel 文件已生成: {xlsx_file}")
            generated_files.append(xlsx_file)
        else:
            logger.warning("没有数据可以生成 Excel 文件")

    return generated_files


def format_markdown_table(rows: List[Dict[str, Any]], title: str) -> str:
    """生成 markdown 格式的表格"""
    if not rows:
        return f"# {title}\n\n没有数据可显示\n"

    lines = [f"# {title}", ""]
    columns = list(rows[0].keys())
    lines.append("| " + " | ".join(columns) + " |")
    lines.append("| " + " | ".join(["---"] * len(columns)) + " |")

    for row in rows:
        values = []
        for col in columns:
            value = row.get(col, "")
            if isinstance(value, float):
                value = f"{value:.3f}"
            # markdown 表格中用 <br> 替换换行
            if isinstance(value, str) and "\n" in value:
                value = value.replace("\n", "<br>")
            values.append(str(value))
        lines.append("| " + " | ".join(values) + " |")

    return "\n".join(lines) + "\n"


def print_markdown_table(rows: List[Dict[str, Any]], title: str) -> None:
    """打印markdown格式的表格"""
    print(format_markdown_table(rows, title))
