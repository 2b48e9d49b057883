"""
统计命令模块
"""

import time
from pathlib import Path

from ..validators import validate_output_format, validate_sort_field, validate_file
from ..file_utils import load_trace_file, output_base_name
from ...presenter import build_function_rows, generate_output_files, print_markdown_table
from ...utils.tree_utils import get_tree_statistics


class SummaryCommand:
    """统计命令处理器"""

    def run(self, args) -> int:
        """输出调用树统计和函数统计表"""
        print(f"=== 追踪统计 ===")
        print(f"文件: {args.file}")
        print(f"排序字段: {args.sort_by}")
        print(f"输出格式: {args.output_format if args.output_format else '无'}")
        print(f"输出目录: {args.output_dir}")
        print()

        try:
            validate_sort_field(args.sort_by)
            validate_output_format(args.output_format)
        except ValueError as e:
            print(f"错误: 参数验证失败 - {e}")
            return 1

        if not validate_file(args.file):
            return 1

        try:
            start_time = time.time()
            trace = load_trace_file(args.file, events=args.events)
        except (ValueError, OSError) as e:
            print(f"错误: 读取追踪失败 - {e}")
            return 1

        stats = get_tree_statistics(trace)
        for key, value in stats.items():
            print(f"{key}: {value}")
        print()

        rows = build_function_rows(trace, sort_by=args.sort_by)
        if args.top:
            rows = rows[:args.top]

        if args.print_markdown:
            print_markdown_table(rows, f"{trace.name} 函数统计")

        generated_files = []
        if args.output_format:
            generated_files = generate_output_files(
                rows,
                output_dir=str(Path(args.output_dir)),
                base_name=output_base_name(args.file, 'functions'),
                output_format=args.output_format,
            )

        print(f"分析完成，耗时 {time.time() - start_time:.2f} 秒，生成 {len(generated_files)} 个文件")
        return 0
