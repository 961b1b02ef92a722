#!/usr/bin/env python
"""
UHECR Propagation Simulation - Main Runner Script

This script runs the complete UHECR propagation simulation.

Usage:
    python run_simulation.py
    python run_simulation.py -n 100 -A 56 -Z 26 -E 300
    python run_simulation.py --data-dir /path/to/tables --no-plot

Interaction tables are read from the uhecr_simulation data directory or from
--data-dir; without tables, synthetic ones are generated. Output files
(Data/, Figures/) will be saved in the current working directory or in the
specified output directory.
"""

from pathlib import Path
import sys

# 添加项目根目录到路径（确保可以导入 uhecr_simulation）
project_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_dir))

from uhecr_simulation.log_config import setup_logging
from uhecr_simulation.runner import run_full_simulation, main as runner_main


def main():
    """脚本入口点"""
    if len(sys.argv) > 1:
        # 如果有命令行参数，使用 argparse 处理
        runner_main()
    else:
        # 默认运行 - 输出到项目目录
        setup_logging()
        run_full_simulation(output_dir=project_dir)


if __name__ == "__main__":
    main()
