"""
sipbot：基金定投计划（SIP）引擎。

目录结构：
    sipbot/
    ├─ core/      # 领域模型、规则（日期/阶梯递增/精度）、协议、依赖注入、配置、日志
    ├─ data/      # 仓储（内存实现）与外部服务客户端（行情、支付 Mock）
    ├─ schemas/   # Pydantic 入参 Schema
    ├─ flows/     # 业务流程（计划生命周期、调度、估值、基金/用户目录）
    └─ cli/       # 命令行入口
"""

__version__ = "0.1.0"
