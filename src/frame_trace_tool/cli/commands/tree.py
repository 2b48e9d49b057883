"""
调用树命令模块
"""

from ..validators import validate_file
from ..file_utils import load_trace_file
from ...utils.tree_utils import print_call_stack_tree


class TreeCommand:
    """调用树命令处理器"""

    def run(self, args) -> int:
        """打印调用树"""
        if args.max_depth < 0:
            print(f"错误: --max-depth 不能为负数: {args.max_depth}")
            return 1

        if not validate_file(args.file):
            return 1

        try:
            trace = load_trace_file(args.file, events=args.events)
        except (ValueError, OSError) as e:
            print(f"错误: 读取追踪失败 - {e}")
            return 1

        print(f"=== 调用树: {trace.name} ({len(trace.frames)} 个帧, 最大深度 {trace.max_depth}) ===")
        print_call_stack_tree(trace, max_depth=args.max_depth)
        return 0
