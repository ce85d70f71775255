import time
from dataclasses import dataclass, field
from typing import Dict, Optional

from .models import Success


@dataclass
class WalletTally:
    succeeded: int = 0
    failed: int = 0

    @property
    def total(self):
        return self.succeeded + self.failed


@dataclass
class Summary:
    total: int
    succeeded: int
    failed: int
    total_amount: float
    elapsed_seconds: float
    throughput_per_second: float
    per_wallet: Dict[str, WalletTally]

    @property
    def success_rate(self):
        return self.succeeded / self.total * 100 if self.total else 0.0


@dataclass
class RunStatistics:
    clock: object = time.monotonic
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    total_amount: float = 0.0
    started_at: Optional[float] = None
    per_wallet: Dict[str, WalletTally] = field(default_factory=dict)

    def start(self):
        if self.started_at is None:
            self.started_at = self.clock()

    def reset(self):
        self.total = self.succeeded = self.failed = 0
        self.total_amount = 0.0
        self.started_at = None
        self.per_wallet = {}

    def record(self, task, outcome):
        self.start()
        self.total += 1
        tally = self.per_wallet.setdefault(task.recipient, WalletTally())
        if isinstance(outcome, Success):
            self.succeeded += 1
            self.total_amount += outcome.amount
            tally.succeeded += 1
        else:
            self.failed += 1
            tally.failed += 1

    def extend(self, results):
        for task, outcome in results:
            self.record(task, outcome)
        return self

    def summarize(self, now=None):
        if self.started_at is None:
            elapsed = 0.0
        else:
            elapsed = max(0.0, (self.clock() if now is None else now) - self.started_at)
        throughput = self.total / elapsed if elapsed > 0 else 0.0
        return Summary(
            total=self.total,
            succeeded=self.succeeded,
            failed=self.failed,
            total_amount=round(self.total_amount, 8),
            elapsed_seconds=elapsed,
            throughput_per_second=throughput,
            per_wallet={addr: WalletTally(t.succeeded, t.failed) for addr, t in self.per_wallet.items()},
        )


def short_addr(addr, head=10, tail=4):
    if len(addr) <= head + tail + 3:
        return addr
    return f"{addr[:head]}...{addr[-tail:]}"


def format_summary(summary, c, per_wallet_limit=10, title="FINAL SUMMARY"):
    lines = [
        f"\n{c['c']}{'═' * 50}",
        f"  📊 {title}",
        f"{'═' * 50}{c['r']}",
        f"  Total Txs:      {summary.total}",
        f"  {c['g']}Successful:{c['r']}     {summary.succeeded} ({summary.success_rate:.1f}%)",
        f"  {c['R']}Failed:{c['r']}         {summary.failed}",
        f"  DIAM Sent:      {summary.total_amount:.4f}",
        f"  Duration:       {summary.elapsed_seconds:.1f}s",
        f"  Avg TPS:        {summary.throughput_per_second:.2f}",
    ]
    if summary.per_wallet and len(summary.per_wallet) <= per_wallet_limit:
        lines.append(f"\n  {c['y']}Per-Wallet:{c['r']}")
        for addr, tally in summary.per_wallet.items():
            status = f"{c['g']}✓" if tally.failed == 0 else f"{c['R']}✗"
            lines.append(f"    {short_addr(addr)}: {tally.succeeded}/{tally.total} {status}{c['r']}")
    lines.append(f"{'═' * 50}\n")
    return "\n".join(lines)
