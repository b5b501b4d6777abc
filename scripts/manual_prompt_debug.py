"""One-off script for debugging green screen prompt generation."""

import sys

from config.settings import load_config
from modules.generation.client import GenerationClient
from modules.generation.controller import GenerationController
from modules.generation.state import Completed
from modules.utils.logging import setup_logging


def main() -> None:
    # 1. 准备真实配置与客户端
    config = load_config()
    setup_logging(config)

    client = GenerationClient(config)
    print("可用后端:", client.available_backends() or "无", "默认:", client.default_backend())
    if client.warnings:
        print("警告:", "; ".join(client.warnings))

    # 2. 通过控制器跑一次完整流程，与界面行为一致
    controller = GenerationController(client)
    user_input = " ".join(sys.argv[1:]) or "一只燃烧的火凤凰，正在展翅高飞..."
    state = controller.submit(user_input)

    print("状态:", state.status.value)
    if isinstance(state, Completed):
        print(state.prompt)
    else:
        print("错误:", getattr(state, "error", ""))


if __name__ == "__main__":
    main()
