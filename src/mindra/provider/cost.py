"""CostCalculator -- 成本计算

按固定的每百万 token 单价计算 USD 成本，截断（非四舍五入）到 4 位小数。
使用 Decimal 精确计算，避免浮点误差导致截断结果偏小。
"""

from decimal import ROUND_DOWN, Decimal

TOKENS_PER_MILLION = Decimal(1_000_000)
COST_QUANTUM = Decimal("0.0001")


class CostCalculator:
    """成本计算器

    单价属于部署配置，不属于行为；构造后只读。
    """

    def __init__(
        self,
        input_price_per_mtok: Decimal | int | str = Decimal("3"),
        output_price_per_mtok: Decimal | int | str = Decimal("15"),
    ) -> None:
        """
        Args:
            input_price_per_mtok: 每百万输入 token 价格（USD）
            output_price_per_mtok: 每百万输出 token 价格（USD）
        """
        self.input_price_per_mtok = Decimal(input_price_per_mtok)
        self.output_price_per_mtok = Decimal(output_price_per_mtok)
        if self.input_price_per_mtok < 0 or self.output_price_per_mtok < 0:
            raise ValueError("token prices must be non-negative")

    def calculate_cost(self, input_tokens: int, output_tokens: int) -> Decimal:
        """计算一次调用的 USD 成本

        cost = input_tokens × 输入单价 + output_tokens × 输出单价，截断到 4 位小数。

        Raises:
            ValueError: token 数为负
        """
        if input_tokens < 0 or output_tokens < 0:
            raise ValueError("token counts must be non-negative")

        raw = (
            Decimal(input_tokens) * self.input_price_per_mtok
            + Decimal(output_tokens) * self.output_price_per_mtok
        ) / TOKENS_PER_MILLION
        return raw.quantize(COST_QUANTUM, rounding=ROUND_DOWN)
