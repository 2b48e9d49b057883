"""
视口命令模块
"""

from ..validators import validate_window_options, validate_percent, validate_file
from ..file_utils import load_trace_file
from ...bounds import TraceBounds
from ...utils.search import iter_visible_frames


class WindowCommand:
    """视口命令处理器：依次执行窗口设置、缩放、平移，然后列出可见帧"""

    def run(self, args) -> int:
        try:
            validate_window_options(args.left, args.right)
            validate_percent(args.at, '--at')
            if args.minimum_interval_time <= 0:
                raise ValueError(f"--minimum-interval-time 必须为正数: {args.minimum_interval_time}")
        except ValueError as e:
            print(f"错误: 窗口选项验证失败 - {e}")
            return 1

        if not validate_file(args.file):
            return 1

        try:
            trace = load_trace_file(args.file, events=args.events)
        except (ValueError, OSError) as e:
            print(f"错误: 读取追踪失败 - {e}")
            return 1

        bounds = TraceBounds(minimum_interval_time=args.minimum_interval_time)
        bounds.set_trace(trace)

        if args.left is not None or args.right is not None:
            bounds.set_bounds(args.left, args.right)
        if args.center is not None:
            bounds.center = args.center
        if args.zoom:
            bounds.zoom(args.zoom, args.at if args.at is not None else 0.5)
        if args.pan:
            bounds.pan(args.pan)

        print(f"=== 视口: [{bounds.left:.6f}, {bounds.right:.6f}] "
              f"时间 [{bounds.left_time:.3f}, {bounds.right_time:.3f}] ===")

        count = 0
        for frame in iter_visible_frames(trace, bounds.left_time, bounds.right_time):
            count += 1
            if args.limit and count > args.limit:
                continue
            offset = bounds.percentage_from_time(frame.start_time, True)
            end = f"{frame.end_time:.3f}" if frame.is_closed else "..."
            print(f"{'  ' * frame.depth}{frame.name or '(anonymous)'} "
                  f"[{frame.start_time:.3f}, {end}] x={offset:.3f}")

        if args.limit and count > args.limit:
            print(f"... 还有 {count - args.limit} 个帧")
        print(f"可见帧数: {count}")
        return 0
