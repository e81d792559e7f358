from __future__ import annotations

"""主应用入口：姿态线框显示 + 健身动作识别与时长汇总。

核心流程：
1. 读取摄像头帧；
2. 执行姿态推理，将每个人的观测组装为 Pose；
3. 主体姿态送入动作预测器，每 stride 帧产生一次预测事件；
4. 模型标签的预测事件累加到动作帧数统计；
5. 绘制线框与预测标签，输出 JSONL 记录，可选转发关键点；
6. 退出时打印各动作时长汇总（运行中按 s 也可查看）。
"""

import argparse
import time
from dataclasses import replace
from pathlib import Path
from typing import Sequence

import cv2

from .actions.aggregate import PredictionAggregator
from .actions.predictor import ActionPredictor
from .actions.rules import ActionRuleEngine
from .actions.summary import format_summary, summarize
from .config import (
    AppConfig,
    coerce_source,
    config_keys,
    default_source,
    load_config_file,
    log_dir,
    prepare_model_arg,
    project_root,
    timestamp,
)
from .features.pose import assemble_poses, dominant_pose
from .io.capture import capture_fps, iter_frames, open_capture
from .io.output import JsonlEmitter
from .io.relay import LandmarkRelay, RelayConfig
from .render.canvas import draw_poses, draw_prediction
from .types import ActionPrediction, Pose
from .vision.pose import infer_pose, load_pose_model


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Pose wireframe preview with rule-based exercise recognition and duration summary."
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML file with default values (keys match the long option names).",
    )
    parser.add_argument(
        "--pose-model",
        help="Pose model path or name (default: models/yolo26n-pose.pt).",
    )
    parser.add_argument(
        "--source",
        help="Webcam index (e.g. 0), device path (e.g. /dev/video0) or video file.",
    )
    parser.add_argument("--conf", type=float, help="Person detection confidence threshold.")
    parser.add_argument("--imgsz", type=int, help="Inference image size.")
    parser.add_argument("--device", help="Device to run on (e.g. 0, 0,1, or cpu).")
    parser.add_argument(
        "--keypoint-conf",
        type=float,
        help="Minimum keypoint confidence for a joint to become a landmark.",
    )
    parser.add_argument(
        "--stride",
        type=int,
        help="Frames covered by each action prediction (>=1).",
    )
    parser.add_argument(
        "--fps",
        type=float,
        help="Capture FPS target; also used to convert frame counts to seconds.",
    )
    parser.add_argument(
        "--interval",
        type=float,
        help="JSONL output interval in seconds (0 emits every frame).",
    )
    parser.add_argument(
        "--relay-url",
        help="HTTP endpoint that receives landmark records as JSON (disabled if empty).",
    )
    parser.add_argument("--relay-timeout", type=float, help="Relay request timeout in seconds.")
    parser.add_argument(
        "--flip-y",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Treat keypoint coordinates as bottom-left origin.",
    )
    parser.add_argument(
        "--no-preview",
        action="store_true",
        default=None,
        help="Disable preview window.",
    )
    parser.add_argument(
        "--log-path",
        help="Optional JSONL log path. Default: output/logs/exercise_<timestamp>.jsonl",
    )
    parser.add_argument(
        "--no-log",
        action="store_true",
        default=None,
        help="Disable log file output (stdout still enabled).",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> AppConfig:
    """解析命令行参数，合并 YAML 默认值后返回配置对象。

    优先级：命令行 > 配置文件 > AppConfig 默认值。
    """
    args = build_parser().parse_args(argv)
    config = AppConfig()
    if args.config:
        config_path = Path(args.config).expanduser()
        if not config_path.is_absolute():
            config_path = (project_root() / config_path).resolve()
        config = replace(config, **load_config_file(config_path))

    overrides = {
        key: getattr(args, key)
        for key in config_keys()
        if getattr(args, key, None) is not None
    }
    return replace(config, **overrides)


def main(argv: Sequence[str] | None = None) -> int:
    """主程序入口。

    返回：
        int: 0 表示正常退出。
    """
    config = parse_args(argv)
    if config.stride < 1:
        raise ValueError(f"--stride must be >= 1, got {config.stride}")

    source_arg = config.source if config.source is not None else default_source()
    source = coerce_source(source_arg)

    pose_model = load_pose_model(prepare_model_arg(config.pose_model))

    cap, backend_name = open_capture(source)
    if not cap:
        raise RuntimeError(f"Unable to open webcam source: {source_arg}")
    # 尝试设置采集帧率；部分设备可能忽略该设置。
    if config.fps and config.fps >= 1:
        cap.set(cv2.CAP_PROP_FPS, float(config.fps))
    fps = capture_fps(cap, fallback=config.fps)

    predictor = ActionPredictor(
        ActionRuleEngine(keypoint_conf=config.keypoint_conf),
        stride=config.stride,
    )
    aggregator = PredictionAggregator()
    relay = LandmarkRelay(RelayConfig(endpoint=config.relay_url, timeout=config.relay_timeout))

    emitters = [JsonlEmitter()]
    log_emitter = None
    if not config.no_log:
        if config.log_path:
            log_path = Path(config.log_path).expanduser()
            if not log_path.is_absolute():
                log_path = (project_root() / log_path).resolve()
        else:
            log_path = log_dir() / f"exercise_{timestamp()}.jsonl"
        log_emitter = JsonlEmitter.open(log_path)
        emitters.append(log_emitter)

    show_preview = not config.no_preview
    prediction = ActionPrediction.starting()
    last_emit = 0.0
    frame_index = 0

    try:
        for frame in iter_frames(cap):
            now = time.time()
            batch = infer_pose(
                pose_model,
                frame,
                conf=config.conf,
                imgsz=config.imgsz,
                device=config.device,
                keypoint_conf=config.keypoint_conf,
            )
            poses = assemble_poses(batch.observations)

            event = predictor.push(dominant_pose(poses), now)
            if event is not None:
                prediction, frame_count = event
                aggregator.record_prediction(prediction, frame_count)

            relay.submit(poses)

            # 输出节流：interval <= 0 表示每帧输出；仅在检测到人体时输出。
            should_emit = config.interval <= 0 or (now - last_emit) >= config.interval
            if should_emit and poses:
                record = _build_record(now, frame_index, prediction, poses)
                for emitter in emitters:
                    emitter.emit(record)
                last_emit = now

            if show_preview:
                annotated = draw_poses(frame, poses, flip_y=config.flip_y)
                draw_prediction(annotated, prediction)
                cv2.imshow("Guess My Exercise", annotated)
                key = cv2.waitKey(1) & 0xFF
                if key == ord("q"):
                    break
                if key == ord("s"):
                    print(format_summary(summarize(aggregator.snapshot(), fps)))

            frame_index += 1

    except KeyboardInterrupt:
        pass
    finally:
        cap.release()
        relay.close()
        if show_preview:
            cv2.destroyAllWindows()
        counts = aggregator.snapshot()
        if log_emitter is not None:
            log_emitter.emit({"type": "summary", "fps": fps, "counts": counts})
            log_emitter.close()

    print(f"Capture ended (backend: {backend_name}).")
    print(format_summary(summarize(counts, fps)))
    return 0


def _build_record(
    now: float,
    frame_index: int,
    prediction: ActionPrediction,
    poses: list[Pose],
) -> dict:
    """构建单条结构化输出记录（用于 stdout/JSONL）。"""
    return {
        "ts": round(now, 3),
        "frame": frame_index,
        "prediction": prediction.label,
        "prediction_conf": None if prediction.confidence is None else round(prediction.confidence, 3),
        "poses": [
            {
                "area": round(pose.area, 4),
                "landmarks": [landmark.to_record() for landmark in pose.landmarks],
            }
            for pose in poses
        ],
    }


if __name__ == "__main__":
    raise SystemExit(main())
