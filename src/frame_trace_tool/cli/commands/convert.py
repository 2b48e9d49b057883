"""
转换命令模块
"""

from ..validators import validate_file
from ...parser import load_event_log, record_trace_events, save_trace


class ConvertCommand:
    """将事件日志重放为快照"""

    def run(self, args) -> int:
        if not validate_file(args.log):
            return 1

        try:
            records = load_event_log(args.log)
            trace = record_trace_events(records, name=args.log)
            output = save_trace(trace, args.output, indent=args.indent)
        except (ValueError, OSError) as e:
            print(f"错误: 转换失败 - {e}")
            return 1

        print(f"快照已生成: {output} ({len(trace.frames)} 个帧, {len(trace.functions)} 个函数)")
        return 0
