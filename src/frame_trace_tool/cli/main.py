"""
CLI主模块
"""

import argparse
import logging
import sys

from .commands import SummaryCommand, TreeCommand, WindowCommand, ConvertCommand
from ..bounds import MINIMUM_INTERVAL_TIME


def _add_input_arguments(parser):
    parser.add_argument('file', help='追踪快照 (.json/.json.gz) 或事件日志 (.jsonl)')
    parser.add_argument('--events', action='store_true',
                        help='按事件日志读取文件 (默认根据 .jsonl 后缀判断)')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='frame-trace-tool',
        description="Frame Trace Tool - 函数调用追踪的调用树和耗时分析",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例用法:
  # 统计函数耗时，按自身耗时排序，输出 json 和 xlsx
  frame-trace-tool summary trace.json --sort-by self_time --output-format json,xlsx

  # 读取事件日志并打印前 20 个函数的 markdown 表格
  frame-trace-tool summary events.jsonl --top 20 --print-markdown --output-format ""

  # 打印调用树
  frame-trace-tool tree trace.json --max-depth 5

  # 在 30% 的位置放大后列出可见帧
  frame-trace-tool window trace.json --zoom -400 --at 0.3

  # 选中一个时间窗口并向右平移
  frame-trace-tool window trace.json --left 0.2 --right 0.4 --pan 500

  # 将事件日志转换为快照
  frame-trace-tool convert events.jsonl trace.json.gz
        """
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='输出调试日志')

    subparsers = parser.add_subparsers(dest='command', help='可用命令')

    # summary 命令
    summary_parser = subparsers.add_parser('summary', help='输出调用树统计和函数耗时统计')
    _add_input_arguments(summary_parser)
    summary_parser.add_argument('--sort-by', default='self_time',
                                help='排序字段: self_time, total_time, count, name, id (默认: self_time)')
    summary_parser.add_argument('--top', type=int, default=None, help='只输出前 N 个函数')
    summary_parser.add_argument('--print-markdown', action='store_true',
                                help='是否在stdout中以markdown格式打印表格 (默认: False)')
    summary_parser.add_argument('--output-format', default='json,xlsx',
                                help='输出格式: json, xlsx, json,xlsx，空字符串表示不输出文件 (默认: json,xlsx)')
    summary_parser.add_argument('--output-dir', default='.', help='输出目录 (默认: 当前目录)')

    # tree 命令
    tree_parser = subparsers.add_parser('tree', help='打印调用树')
    _add_input_arguments(tree_parser)
    tree_parser.add_argument('--max-depth', type=int, default=10, help='最大打印深度 (默认: 10)')

    # window 命令
    window_parser = subparsers.add_parser('window', help='执行缩放/平移并列出可见帧')
    _add_input_arguments(window_parser)
    window_parser.add_argument('--left', type=float, default=None, help='窗口左边界 [0, 1]')
    window_parser.add_argument('--right', type=float, default=None, help='窗口右边界 [0, 1]')
    window_parser.add_argument('--center', type=float, default=None, help='窗口中心 [0, 1]')
    window_parser.add_argument('--zoom', type=float, default=0, help='缩放量，负数放大 (按 amount/500 的宽度变化)')
    window_parser.add_argument('--at', type=float, default=None, help='缩放中心在窗口中的位置 (默认: 0.5)')
    window_parser.add_argument('--pan', type=float, default=0, help='平移量 (按 amount/1000 的宽度平移)')
    window_parser.add_argument('--minimum-interval-time', type=float, default=MINIMUM_INTERVAL_TIME,
                               help=f'最小窗口时长 (默认: {MINIMUM_INTERVAL_TIME})')
    window_parser.add_argument('--limit', type=int, default=200, help='最多打印的帧数，0 表示不限制 (默认: 200)')

    # convert 命令
    convert_parser = subparsers.add_parser('convert', help='将事件日志重放为快照')
    convert_parser.add_argument('log', help='事件日志路径')
    convert_parser.add_argument('output', help='输出快照路径，.gz 后缀时压缩')
    convert_parser.add_argument('--indent', type=int, default=None, help='JSON 缩进')

    return parser


def parse_arguments(argv=None):
    """解析命令行参数"""
    return build_parser().parse_args(argv)


COMMANDS = {
    'summary': SummaryCommand,
    'tree': TreeCommand,
    'window': WindowCommand,
    'convert': ConvertCommand,
}


def main(argv=None):
    """主函数"""
    args = parse_arguments(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if not args.command:
        print("错误: 请指定命令 (summary, tree, window, convert)")
        print("使用 --help 查看帮助信息")
        return 1

    command_cls = COMMANDS.get(args.command)
    if command_cls is None:
        print(f"错误: 未知命令: {args.command}")
        return 1
    return command_cls().run(args)


if __name__ == "__main__":
    sys.exit(main())
