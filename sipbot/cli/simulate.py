from __future__ import annotations

import argparse
import random
import sys
from datetime import date
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from sipbot.core.container import get_market_price_service, get_payment_gateway
from sipbot.core.errors import SipError
from sipbot.core.log import log, setup_logging
from sipbot.core.models import Frequency, FundCategory, PaymentStatus, PortfolioSummary, RiskLevel, SipTransaction
from sipbot.core.rules.precision import quantize_amount, quantize_nav, quantize_pct, quantize_units
from sipbot.flows.fund import add_fund
from sipbot.flows.plan import create_plan, get_plan
from sipbot.flows.portfolio import get_portfolio_summary, get_user_portfolio, get_transaction_history
from sipbot.flows.scheduler import execute_due
from sipbot.flows.user import add_user

console = Console()

_STATUS_STYLE = {
    PaymentStatus.SUCCESS: "green",
    PaymentStatus.FAILURE: "red",
    PaymentStatus.PENDING: "yellow",
}


def _decimal(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation as e:
        raise argparse.ArgumentTypeError(f"不是合法数字：{value}") from e


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """解析命令行参数。"""
    parser = argparse.ArgumentParser(
        prog="python -m sipbot.cli.simulate",
        description="定投计划模拟：按节奏执行 N 期扣款并输出持仓估值",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例：
  python -m sipbot.cli.simulate --amount 1000 --step-up 10 --periods 12
  python -m sipbot.cli.simulate --freq QUARTERLY --start 2024-01-31 --market-move 0.02
  python -m sipbot.cli.simulate --success-rate 0.7 --seed 42
        """,
    )
    parser.add_argument("--fund-name", default="Index Growth Fund", help="基金名称")
    parser.add_argument(
        "--category",
        choices=[c.value for c in FundCategory],
        default=FundCategory.EQUITY.value,
        help="基金类别",
    )
    parser.add_argument(
        "--risk",
        choices=[r.value for r in RiskLevel],
        default=RiskLevel.HIGH.value,
        help="风险等级",
    )
    parser.add_argument("--nav", type=_decimal, default=Decimal("100"), help="初始净值（默认 100）")
    parser.add_argument("--amount", type=_decimal, default=Decimal("1000"), help="基础定投金额")
    parser.add_argument(
        "--freq",
        choices=[f.value for f in Frequency],
        default=Frequency.MONTHLY.value,
        help="定投频率",
    )
    parser.add_argument("--step-up", type=_decimal, default=Decimal("0"), help="每期递增百分比")
    parser.add_argument("--start", help="首期日期（YYYY-MM-DD，默认今天）")
    parser.add_argument("--periods", type=int, default=12, help="调度次数（默认 12）")
    parser.add_argument(
        "--market-move",
        type=_decimal,
        default=Decimal("0"),
        help="每期调度后的市场整体涨跌（小数，如 0.01 表示 +1%%）",
    )
    parser.add_argument("--success-rate", type=float, default=1.0, help="扣款成功率（0..1）")
    parser.add_argument("--seed", type=int, help="随机数种子")
    parser.add_argument("--log-level", help="日志级别（默认取 SIP_LOG_LEVEL）")
    return parser.parse_args(argv)


def _render_transactions(transactions: list[SipTransaction]) -> None:
    table = Table(title="交易流水")
    table.add_column("交易 ID")
    table.add_column("日期")
    table.add_column("金额", justify="right")
    table.add_column("NAV", justify="right")
    table.add_column("份额", justify="right")
    table.add_column("状态")
    for t in transactions:
        style = _STATUS_STYLE.get(t.status, "")
        table.add_row(
            t.id,
            t.trade_date.isoformat(),
            str(quantize_amount(t.amount)),
            str(quantize_nav(t.nav)),
            str(quantize_units(t.units)),
            f"[{style}]{t.status}[/{style}]",
        )
    console.print(table)


def _render_summary(summary: PortfolioSummary) -> None:
    table = Table(title=f"组合汇总（{summary.user_id}）", show_header=False)
    table.add_column("指标")
    table.add_column("数值", justify="right")
    style = "green" if summary.gain_loss >= 0 else "red"
    table.add_row("累计投入", str(quantize_amount(summary.total_invested)))
    table.add_row("持有份额", str(quantize_units(summary.total_units)))
    table.add_row("当前市值", str(quantize_amount(summary.total_current_value)))
    table.add_row("浮动盈亏", f"[{style}]{quantize_amount(summary.gain_loss)}[/{style}]")
    table.add_row("收益率", f"[{style}]{quantize_pct(summary.gain_loss_pct)}%[/{style}]")
    table.add_row("计划数（活跃/暂停/终止）", f"{summary.active_count}/{summary.paused_count}/{summary.stopped_count}")
    console.print(table)


def _run(args: argparse.Namespace) -> int:
    start = date.fromisoformat(args.start) if args.start else date.today()
    if args.periods < 1:
        raise ValueError(f"调度次数必须 >= 1：{args.periods}")

    market = get_market_price_service()
    gateway = get_payment_gateway()
    gateway.set_success_rate(args.success_rate)
    if args.seed is not None:
        market.rng = random.Random(args.seed)
        gateway.rng = random.Random(args.seed)

    user = add_user(name="simulator", email="simulator@example.com")
    fund = add_fund(
        name=args.fund_name,
        category=FundCategory(args.category),
        risk_level=RiskLevel(args.risk),
        nav=args.nav,
    )
    plan = create_plan(
        user_id=user.id,
        fund_id=fund.id,
        amount=args.amount,
        frequency=Frequency(args.freq),
        start_date=start,
        step_up_pct=args.step_up,
    )
    log(f"✅ 计划创建成功：{plan.id}，首期 {plan.next_execution_date}")

    for _ in range(args.periods):
        as_of = get_plan(plan_id=plan.id).next_execution_date
        execute_due(as_of=as_of)
        if args.market_move:
            market.simulate_market_movement(args.market_move)

    plan = get_plan(plan_id=plan.id)
    log(f"计划 {plan.id}：已成功 {plan.installment_count} 期，下次执行日 {plan.next_execution_date}")

    _render_transactions(get_transaction_history(plan_id=plan.id))
    for item in get_user_portfolio(user_id=user.id):
        console.print(
            f"{item.fund_name}：下一期 {quantize_amount(item.current_installment_amount)}，"
            f"再下一期 {quantize_amount(item.next_installment_amount)}"
        )
    _render_summary(get_portfolio_summary(user_id=user.id))
    return 0


def main(argv: list[str] | None = None) -> int:
    """
    定投模拟 CLI。

    Returns:
        退出码：0=成功；4=参数错误；5=其他失败。
    """
    load_dotenv()
    args = _parse_args(argv)
    setup_logging(args.log_level)

    try:
        return _run(args)
    except ValueError as err:
        log(f"❌ 参数错误：{err}")
        return 4
    except SipError as err:
        log(f"❌ 模拟失败：{err}")
        return 5
    except Exception as err:  # noqa: BLE001
        log(f"❌ 未知错误：{err}")
        return 5


if __name__ == "__main__":
    sys.exit(main())
