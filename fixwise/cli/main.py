"""CLI 主程序

使用 Rich 库美化 CLI 输出。各子命令由 fixwise.__main__ 的 click 命令组调用。
"""
import asyncio
import uuid
from datetime import date
from typing import Optional

from rich.console import Console
from rich.text import Text

from fixwise.cli.rendering import DiagnosisRenderer
from fixwise.core.app_state import AppState, logistics_url
from fixwise.core.orchestrator import DiagnosisOrchestrator, create_manual_diagnosis
from fixwise.core.request_builder import ImagePart
from fixwise.core.stats import ALL_CATEGORIES, CATEGORIES, filter_by_window, issue_stats, region_stats
from fixwise.dao.kv_store import SqliteKVStore
from fixwise.models import FaultDiagnosis, KnowledgeEntry
from fixwise.utils.config import Config, load_config


class FixwiseCLI:
    """售后诊断命令行

    诊断历史与专家知识保存在本地 SQLite；只有 AI 诊断需要加载分析服务配置。
    """

    def __init__(
        self,
        db_path: Optional[str] = None,
        config_path: Optional[str] = None,
        console: Optional[Console] = None,
    ):
        """
        初始化基础组件

        Args:
            db_path: 数据库路径，默认使用配置或 data/fixwise.db
            config_path: 配置文件路径，默认 config.yaml
            console: Rich Console 实例
        """
        self.console = console or Console()
        self.renderer = DiagnosisRenderer(self.console)
        self.config_path = config_path
        self._config: Optional[Config] = None
        self.state = AppState(SqliteKVStore(db_path))

    @property
    def config(self) -> Config:
        """分析服务配置（延迟加载）"""
        if self._config is None:
            self._config = load_config(self.config_path)
        return self._config

    # ===== 诊断录入 =====

    def diagnose(
        self,
        product_name: str,
        category: str,
        description: str,
        region: str = "",
        image_path: Optional[str] = None,
        remark: Optional[str] = None,
        orchestrator: Optional[DiagnosisOrchestrator] = None,
    ) -> FaultDiagnosis:
        """执行 AI 诊断并保存结果

        Raises:
            DiagnosisError: 诊断失败
        """
        orchestrator = orchestrator or DiagnosisOrchestrator(self.config)
        image = ImagePart.from_file(image_path) if image_path else None

        with self.console.status("AI 正在分析故障...", spinner="dots"):
            diagnosis = asyncio.run(orchestrator.analyze(
                product_name,
                category,
                description,
                region,
                history=list(self.state.history),
                knowledge=list(self.state.knowledge),
                image=image,
                remark=remark,
            ))

        self.state.add_diagnosis(diagnosis)
        self.console.print(self.renderer.render_diagnosis(diagnosis))
        return diagnosis

    def manual(self, product_name: str, category: str, description: str, region: str = "",
               issue: Optional[str] = None, solution: Optional[str] = None,
               tracking_number: Optional[str] = None, remark: Optional[str] = None) -> FaultDiagnosis:
        """人工录入诊断记录"""
        diagnosis = create_manual_diagnosis(
            product_name, category, description, region,
            issue=issue, solution=solution,
            tracking_number=tracking_number, remark=remark,
        )
        self.state.add_diagnosis(diagnosis)
        self.console.print(self.renderer.render_diagnosis(diagnosis))
        return diagnosis

    def run_form(self) -> Optional[FaultDiagnosis]:
        """交互式录入表单（AI 诊断）"""
        self.console.print()
        self.console.print(Text(self.renderer.get_logo(), style="bold cyan"))
        self.console.print()
        self.console.print(Text(f"可选品类: {' / '.join(CATEGORIES)}", style="dim"))

        try:
            product_name = self.console.input("产品名称: ").strip()
            category = self.console.input(f"产品品类 [{CATEGORIES[1]}]: ").strip() or CATEGORIES[1]
            region = self.console.input("来源地域: ").strip()
            description = self.console.input("故障现象: ").strip()
            image_path = self.console.input("故障图片路径（可选）: ").strip() or None
            remark = self.console.input("备注（可选）: ").strip() or None
        except (EOFError, KeyboardInterrupt):
            self.console.print(Text("\n已取消录入\n", style="blue"))
            return None

        if not product_name or not description:
            self.console.print(Text("产品名称和故障现象为必填项", style="yellow"))
            return None

        return self.diagnose(product_name, category, description, region,
                             image_path=image_path, remark=remark)

    # ===== 售后跟踪 =====

    def show(self, diagnosis_id: str) -> None:
        self.console.print(self.renderer.render_diagnosis(self.state.get_diagnosis(diagnosis_id)))

    def history(self, query: str = "", time_range: str = "all",
                selected_date: Optional[date] = None) -> None:
        items = self.state.filter_history(query, time_range, selected_date)
        if not items:
            self.console.print(Text("未找到符合当前条件的记录", style="dim"))
            return
        self.console.print(self.renderer.render_history_table(items))

    def set_status(self, diagnosis_id: str, status: str) -> None:
        item = self.state.update_status(diagnosis_id, status)
        text = Text(f"{item.id} 售后状态已更新为 ")
        text.append_text(self.renderer.render_status(item.status))
        self.console.print(text)

    def set_remark(self, diagnosis_id: str, remark: str) -> None:
        self.state.update_remark(diagnosis_id, remark)
        self.console.print(Text("备注已保存", style="green"))

    def set_tracking(self, diagnosis_id: str, tracking_number: str) -> None:
        item = self.state.update_tracking(diagnosis_id, tracking_number)
        if item.tracking_number:
            self.console.print(Text(f"物流单号已保存，查询链接: {logistics_url(item.tracking_number)}", style="green"))
        else:
            self.console.print(Text("物流单号已清除", style="green"))

    def verify(self, diagnosis_id: str, actual_result: str) -> None:
        self.state.update_actual_result(diagnosis_id, actual_result)
        self.console.print(Text("核实结果已保存", style="green"))

    def feedback(self, diagnosis_id: str, rating: str, comment: Optional[str] = None) -> None:
        self.state.set_feedback(diagnosis_id, rating, comment)
        self.console.print(Text("感谢反馈", style="green"))

    # ===== 专家知识 =====

    def list_knowledge(self, query: str = "") -> None:
        self.console.print(self.renderer.render_knowledge_table(self.state.search_knowledge(query)))

    def add_knowledge(self, product_name: str, fault_type: str, cause: str = "",
                      location: str = "", solution: str = "") -> KnowledgeEntry:
        entry = KnowledgeEntry(
            id=uuid.uuid4().hex[:9],
            product_name=product_name,
            fault_type=fault_type,
            cause=cause,
            location=location,
            solution=solution,
        )
        self.state.save_to_knowledge(entry)
        self.console.print(Text(f"专家知识已保存: {entry.id}", style="green"))
        return entry

    def contribute_knowledge(self, diagnosis_id: str, cause: str = "",
                             location: str = "", solution: str = "") -> KnowledgeEntry:
        """将已核实的诊断沉淀为专家知识（故障类型取核实结果，无则取诊断结论）"""
        item = self.state.get_diagnosis(diagnosis_id)
        return self.add_knowledge(
            item.product_name,
            item.actual_result or item.result.fault_issue,
            cause=cause,
            location=location,
            solution=solution or "；".join(item.result.suggested_actions),
        )

    def update_knowledge(self, entry_id: str, **fields) -> KnowledgeEntry:
        existing = self.state.get_knowledge(entry_id)
        changes = {k: v for k, v in fields.items() if v is not None}
        entry = existing.model_copy(update=changes)
        self.state.update_knowledge(entry)
        self.console.print(Text(f"专家知识已更新: {entry.id}", style="green"))
        return entry

    def delete_knowledge(self, entry_id: str) -> None:
        self.state.delete_knowledge(entry_id)
        self.console.print(Text(f"专家知识已删除: {entry_id}", style="green"))

    # ===== 看板 =====

    def stats(self, selected_date: Optional[date] = None, granularity: str = "month",
              category: str = ALL_CATEGORIES) -> None:
        items = filter_by_window(self.state.history, selected_date or date.today(), granularity)
        if not items:
            self.console.print(Text("当前时间范围内暂无售后数据", style="dim"))
            return
        title = "品类分布" if category == ALL_CATEGORIES else f"{category} 故障问题分布"
        self.console.print(self.renderer.render_stats(
            len(items), region_stats(items), issue_stats(items, category), issue_title=title,
        ))
