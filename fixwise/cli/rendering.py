"""共享渲染逻辑

CLI 使用的 Rich 渲染方法，所有方法返回 Rich 可渲染对象，由调用方决定如何输出。
"""
from datetime import datetime
from typing import List, Sequence, Tuple

from rich.box import SIMPLE
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from fixwise.models import FaultDiagnosis, KnowledgeEntry, ProcessingStatus, Severity


STATUS_LABELS = {
    ProcessingStatus.UNPROCESSED: ("未处理", "red"),
    ProcessingStatus.PROCESSING: ("处理中", "yellow"),
    ProcessingStatus.PROCESSED: ("已处理", "green"),
}

SEVERITY_STYLES = {
    Severity.LOW: "green",
    Severity.MEDIUM: "yellow",
    Severity.HIGH: "red",
    Severity.CRITICAL: "bold white on red",
}


def _format_time(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d %H:%M")


class DiagnosisRenderer:
    """诊断结果渲染器"""

    LOGO = """
███████╗██╗██╗  ██╗██╗    ██╗██╗███████╗███████╗
██╔════╝██║╚██╗██╔╝██║    ██║██║██╔════╝██╔════╝
█████╗  ██║ ╚███╔╝ ██║ █╗ ██║██║███████╗█████╗
██╔══╝  ██║ ██╔██╗ ██║███╗██║██║╚════██║██╔══╝
██║     ██║██╔╝ ██╗╚███╔███╔╝██║███████║███████╗
╚═╝     ╚═╝╚═╝  ╚═╝ ╚══╝╚══╝ ╚═╝╚══════╝╚══════╝
"""

    def __init__(self, console: Console = None):
        """初始化渲染器

        Args:
            console: Rich Console 实例，用于获取终端宽度等信息
        """
        self.console = console or Console()

    def get_logo(self) -> str:
        return self.LOGO.strip()

    def render_status(self, status: ProcessingStatus) -> Text:
        """渲染售后状态标签"""
        label, style = STATUS_LABELS[ProcessingStatus(status)]
        return Text(label, style=style)

    def render_progress(self, status: ProcessingStatus) -> Text:
        """渲染售后流程进度：售后报修 → AI 诊断 → 方案核实 → 售后完成"""
        status = ProcessingStatus(status)
        steps = [
            ("售后报修", True),
            ("AI 诊断", True),
            ("方案核实", status in (ProcessingStatus.PROCESSING, ProcessingStatus.PROCESSED)),
            ("售后完成", status == ProcessingStatus.PROCESSED),
        ]
        text = Text()
        for i, (label, active) in enumerate(steps):
            if i:
                text.append(" → ", style="dim")
            text.append(("● " if active else "○ ") + label, style="bold green" if active else "dim")
        return text

    def render_diagnosis(self, diagnosis: FaultDiagnosis) -> Panel:
        """
        渲染诊断详情

        Args:
            diagnosis: 诊断记录

        Returns:
            Rich Panel 对象
        """
        result = diagnosis.result
        kind = "Manual" if diagnosis.is_manual else "AI Analysis"

        header = Text()
        header.append(f"[{kind}] ", style="bold cyan")
        header.append(f"单号: {diagnosis.id}", style="dim")
        header.append(f"  •  {_format_time(diagnosis.timestamp)}", style="dim")

        info = Text()
        info.append("产品: ", style="dim")
        info.append(f"{diagnosis.product_name} ({diagnosis.category})\n", style="bold")
        info.append("地域: ", style="dim")
        info.append(f"{diagnosis.source_region}\n")
        info.append("故障现象: ", style="dim")
        info.append(diagnosis.description)
        if diagnosis.remark:
            info.append("\n备注: ", style="dim")
            info.append(diagnosis.remark)

        conclusion = Text()
        conclusion.append("故障问题: ", style="dim")
        conclusion.append(f"{result.fault_issue}\n", style="bold")
        conclusion.append("置信度: ", style="dim")
        conclusion.append(f"{result.confidence_percent}%", style="bold magenta")
        conclusion.append("  严重程度: ", style="dim")
        conclusion.append(result.severity.value, style=SEVERITY_STYLES[result.severity])
        conclusion.append("\n分析过程: ", style="dim")
        conclusion.append(result.reasoning)

        actions = Text()
        actions.append("建议措施:\n", style="dim")
        for i, action in enumerate(result.suggested_actions, 1):
            actions.append(f"  {i}. {action}\n")

        follow_up = Text()
        follow_up.append("售后状态: ", style="dim")
        follow_up.append_text(self.render_status(diagnosis.status))
        follow_up.append("  物流单号: ", style="dim")
        follow_up.append(diagnosis.tracking_number or "未录入")
        if diagnosis.actual_result:
            follow_up.append("\n核实结果: ", style="dim")
            follow_up.append(diagnosis.actual_result, style="green")
        if diagnosis.feedback:
            follow_up.append("\n反馈: ", style="dim")
            follow_up.append(diagnosis.feedback.rating)
            if diagnosis.feedback.comment:
                follow_up.append(f" - {diagnosis.feedback.comment}")

        return Panel(
            Group(header, self.render_progress(diagnosis.status), Text(""), info,
                  Text(""), conclusion, Text(""), actions, follow_up),
            title="售后详情",
            title_align="left",
            border_style="cyan",
        )

    def render_history_table(self, history: Sequence[FaultDiagnosis]) -> Table:
        """渲染诊断历史列表"""
        table = Table(box=SIMPLE, caption=f"共 {len(history)} 条")
        table.add_column("日期", style="dim", no_wrap=True)
        table.add_column("单号", no_wrap=True)
        table.add_column("产品信息")
        table.add_column("诊断结果")
        table.add_column("售后状态", no_wrap=True)
        table.add_column("物流单号", no_wrap=True)

        for item in history:
            product = Text(item.product_name, style="bold")
            product.append(f"\n{item.category} · {item.source_region}", style="dim")
            issue = Text(item.result.fault_issue)
            if item.actual_result:
                issue.append(f"\n核实: {item.actual_result}", style="green")
            table.add_row(
                _format_time(item.timestamp),
                item.id,
                product,
                issue,
                self.render_status(item.status),
                item.tracking_number or Text("未录入", style="dim italic"),
            )
        return table

    def render_knowledge_table(self, entries: Sequence[KnowledgeEntry]) -> Table:
        """渲染专家知识列表"""
        table = Table(box=SIMPLE, caption=f"共 {len(entries)} 条")
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("产品")
        table.add_column("故障类型")
        table.add_column("原因")
        table.add_column("部位")
        table.add_column("解决方案")
        for entry in entries:
            table.add_row(
                entry.id, entry.product_name, entry.fault_type,
                entry.cause, entry.location, entry.solution,
            )
        return table

    def render_stats(
        self,
        total: int,
        regions: List[Tuple[str, int]],
        issues: List[Tuple[str, int]],
        issue_title: str = "品类分布",
    ) -> Group:
        """渲染看板统计"""
        summary = Text()
        summary.append("售后案例总数 ", style="dim")
        summary.append(str(total), style="bold")
        summary.append("  │  ", style="dim")
        summary.append("覆盖省份数量 ", style="dim")
        summary.append(str(len(regions)), style="bold cyan")

        region_table = Table(title="省份分布", box=SIMPLE, title_justify="left")
        region_table.add_column("省份")
        region_table.add_column("数量", justify="right")
        for name, count in regions:
            region_table.add_row(name, str(count))

        issue_table = Table(title=issue_title, box=SIMPLE, title_justify="left")
        issue_table.add_column("名称")
        issue_table.add_column("数量", justify="right")
        for name, count in issues:
            issue_table.add_row(name, str(count))

        return Group(summary, region_table, issue_table)
