"""命令行单元测试"""
import pytest
from click.testing import CliRunner
from rich.console import Console

from fixwise.__main__ import main
from fixwise.cli.main import FixwiseCLI
from fixwise.core.app_state import AppState
from fixwise.core.errors import InsufficientInputError
from fixwise.core.orchestrator import DiagnosisOrchestrator
from fixwise.dao.kv_store import SqliteKVStore
from fixwise.models import ProcessingStatus
from conftest import FakeTransport


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "fixwise.db")


@pytest.fixture
def runner():
    return CliRunner()


def _state(db_path) -> AppState:
    return AppState(SqliteKVStore(db_path))


class TestCommands:
    """click 命令测试"""

    def test_init(self, runner, db_path):
        """测试: 初始化数据库"""
        result = runner.invoke(main, ["--db", db_path, "init"])
        assert result.exit_code == 0
        assert "[OK]" in result.output

    def test_manual(self, runner, db_path):
        """测试: 人工录入"""
        result = runner.invoke(main, [
            "--db", db_path, "manual",
            "-p", "车载充气泵", "-c", "车载便携充气泵", "-r", "深圳",
            "-d", "充气慢", "--issue", "气缸密封圈磨损", "--tracking", "YT1",
        ])

        assert result.exit_code == 0, result.output
        item = _state(db_path).history[0]
        assert item.is_manual
        assert item.source_region == "广东省"
        assert item.tracking_number == "YT1"

    def test_tracking_workflow(self, runner, db_path):
        """测试: 售后跟踪命令"""
        assert runner.invoke(main, ["--db", db_path, "status", "csa-001", "Processing"]).exit_code == 0
        assert runner.invoke(main, ["--db", db_path, "remark", "csa-001", "需回访"]).exit_code == 0
        assert runner.invoke(main, ["--db", db_path, "tracking", "csa-001", "YT9"]).exit_code == 0
        assert runner.invoke(main, ["--db", db_path, "verify", "csa-001", "泵体开裂"]).exit_code == 0
        result = runner.invoke(main, [
            "--db", db_path, "feedback", "csa-001", "--rating", "Not Helpful", "--comment", "无效",
        ])
        assert result.exit_code == 0

        item = _state(db_path).get_diagnosis("csa-001")
        assert item.status == ProcessingStatus.PROCESSING
        assert item.remark == "需回访"
        assert item.tracking_number == "YT9"
        assert item.actual_result == "泵体开裂"
        assert item.feedback.rating == "Not Helpful"

    def test_show_unknown(self, runner, db_path):
        """测试: 查看不存在的记录"""
        result = runner.invoke(main, ["--db", db_path, "show", "missing"])
        assert result.exit_code == 1
        assert "[ERROR]" in result.output

    def test_read_commands(self, runner, db_path):
        """测试: 查询类命令"""
        for args in (["history"], ["history", "-q", "洗车", "--range", "year"],
                     ["show", "csa-001"], ["knowledge", "list"], ["stats", "-g", "year"]):
            result = runner.invoke(main, ["--db", db_path] + args)
            assert result.exit_code == 0, (args, result.output)

    def test_knowledge_commands(self, runner, db_path):
        """测试: 专家知识命令"""
        result = runner.invoke(main, [
            "--db", db_path, "knowledge", "add",
            "-p", "车载充气泵", "-t", "充气缓慢且噪音大", "--cause", "活塞环磨损",
        ])
        assert result.exit_code == 0
        knowledge = _state(db_path).knowledge
        assert len(knowledge) == 2
        assert knowledge[1].cause == "活塞环磨损"

        result = runner.invoke(main, ["--db", db_path, "knowledge", "update", "kb-1", "--solution", "更换电机"])
        assert result.exit_code == 0
        assert _state(db_path).get_knowledge("kb-1").solution == "更换电机"

        result = runner.invoke(main, ["--db", db_path, "knowledge", "delete", "kb-1", "--yes"])
        assert result.exit_code == 0
        assert [k.id for k in _state(db_path).knowledge] == [knowledge[1].id]

    def test_contribute_knowledge(self, runner, db_path):
        """测试: 将诊断沉淀为专家知识"""
        result = runner.invoke(main, [
            "--db", db_path, "knowledge", "contribute", "csa-001", "--location", "进水滤网",
        ])
        assert result.exit_code == 0
        entry = _state(db_path).knowledge[0]
        assert entry.product_name == "高压洗车器"
        assert entry.fault_type == "进水滤网严重堵塞"
        assert entry.location == "进水滤网"

    def test_diagnose_without_config(self, runner, db_path, tmp_path):
        """测试: 缺少配置文件时给出提示"""
        result = runner.invoke(main, [
            "--db", db_path, "--config", str(tmp_path / "missing.yaml"),
            "diagnose", "-p", "a", "-d", "b",
        ])
        assert result.exit_code == 1
        assert "配置文件不存在" in result.output


class TestFixwiseCLI:
    """FixwiseCLI 测试"""

    def test_diagnose(self, db_path, config):
        """测试: AI 诊断并保存"""
        cli = FixwiseCLI(db_path=db_path, console=Console(record=True, width=200))
        orchestrator = DiagnosisOrchestrator(config, FakeTransport())

        diagnosis = cli.diagnose("高压洗车器", "洗车器", "水压小", "江苏", orchestrator=orchestrator)

        assert _state(db_path).history[0].id == diagnosis.id
        assert diagnosis.source_region == "江苏省"
        assert "82%" in cli.console.export_text()

    def test_diagnose_failure_not_saved(self, db_path, config):
        """测试: 诊断失败时不保存记录"""
        cli = FixwiseCLI(db_path=db_path, console=Console(record=True))
        orchestrator = DiagnosisOrchestrator(config, FakeTransport(text='{"isInformationValid": false}'))

        with pytest.raises(InsufficientInputError):
            cli.diagnose("a", "b", "坏了", orchestrator=orchestrator)

        assert [h.id for h in _state(db_path).history] == ["csa-001"]


class TestOptionValidation:
    """参数校验测试"""

    @pytest.mark.parametrize("args", [
        ["history", "--range", "day", "--date", "2024/06/01"],
        ["stats", "--date", "not-a-date"],
    ])
    def test_invalid_date(self, runner, db_path, args):
        """测试: 日期格式错误时给出用法提示"""
        result = runner.invoke(main, ["--db", db_path] + args)
        assert result.exit_code == 2
        assert "--date" in result.output

    def test_valid_date(self, runner, db_path):
        """测试: 合法日期"""
        result = runner.invoke(main, ["--db", db_path, "stats", "--date", "2024-06-01", "-g", "day"])
        assert result.exit_code == 0, result.output

    def test_knowledge_update_conflict(self, runner, db_path):
        """测试: 编辑成已存在的产品和故障类型时报错"""
        result = runner.invoke(main, [
            "--db", db_path, "knowledge", "update", "kb-1",
            "-p", "车载充气泵", "-t", "充气缓慢且噪音大",
        ])
        assert result.exit_code == 1
        assert "[ERROR]" in result.output
        assert len(_state(db_path).knowledge) == 2
