"""fixwise 命令行入口

使用方式：
    python -m fixwise init                       # 初始化本地数据库
    python -m fixwise form                       # 交互式录入并进行 AI 诊断
    python -m fixwise diagnose -p ... -d ...     # AI 诊断
    python -m fixwise manual -p ... -d ...       # 人工录入
    python -m fixwise history                    # 诊断历史
    python -m fixwise knowledge list             # 专家知识库
    python -m fixwise stats                      # 看板统计
    python -m fixwise api                        # 启动 FastAPI 服务
"""
import logging
import sys
from datetime import datetime
from typing import Optional

import click

from fixwise.core.errors import DiagnosisError
from fixwise.utils.config import WebConfig


def _fail(message: str) -> None:
    click.echo(f"\n[ERROR] {message}", err=True)
    sys.exit(1)


DATE_TYPE = click.DateTime(formats=["%Y-%m-%d"])


def _to_date(value: Optional[datetime]):
    return value.date() if value is not None else None


def _make_cli(ctx: click.Context):
    from fixwise.cli.main import FixwiseCLI
    try:
        return FixwiseCLI(db_path=ctx.obj.get("db"), config_path=ctx.obj.get("config"))
    except ValueError as e:
        _fail(str(e))


@click.group()
@click.option("--db", default=None, help="数据库文件路径（默认: data/fixwise.db）")
@click.option("--config", default=None, help="配置文件路径（默认: config.yaml）")
@click.option("-v", "--verbose", is_flag=True, help="输出调试日志")
@click.pass_context
def main(ctx: click.Context, db: str, config: str, verbose: bool):
    """产品售后故障诊断助手"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    ctx.ensure_object(dict)
    ctx.obj["db"] = db
    ctx.obj["config"] = config


@main.command()
@click.pass_context
def init(ctx: click.Context):
    """初始化数据库（仅创建表结构）"""
    from fixwise.scripts.init_db import init_database

    try:
        path = init_database(ctx.obj.get("db"))
        click.echo(f"\n[OK] 数据库初始化成功: {path}")
    except Exception as e:
        _fail(f"初始化失败: {e}")


@main.command()
@click.option("-p", "--product", required=True, help="产品名称")
@click.option("-c", "--category", default="吸尘器", show_default=True, help="产品品类")
@click.option("-r", "--region", default="", help="来源地域（省份、城市均可）")
@click.option("-d", "--description", required=True, help="故障现象描述")
@click.option("--image", type=click.Path(exists=True, dir_okay=False), default=None, help="故障图片")
@click.option("--remark", default=None, help="备注")
@click.pass_context
def diagnose(ctx, product, category, region, description, image, remark):
    """AI 智能诊断"""
    cli = _make_cli(ctx)
    try:
        cli.diagnose(product, category, description, region, image_path=image, remark=remark)
    except DiagnosisError as e:
        _fail(e.message)
    except FileNotFoundError as e:
        _fail(str(e))


@main.command()
@click.pass_context
def form(ctx):
    """交互式录入表单"""
    cli = _make_cli(ctx)
    try:
        cli.run_form()
    except DiagnosisError as e:
        _fail(e.message)
    except FileNotFoundError as e:
        _fail(str(e))


@main.command()
@click.option("-p", "--product", required=True, help="产品名称")
@click.option("-c", "--category", default="吸尘器", show_default=True, help="产品品类")
@click.option("-r", "--region", default="", help="来源地域")
@click.option("-d", "--description", required=True, help="故障现象描述")
@click.option("--issue", default=None, help="故障问题")
@click.option("--solution", default=None, help="处理方案")
@click.option("--tracking", default=None, help="物流单号")
@click.option("--remark", default=None, help="备注")
@click.pass_context
def manual(ctx, product, category, region, description, issue, solution, tracking, remark):
    """人工录入诊断记录"""
    cli = _make_cli(ctx)
    try:
        cli.manual(product, category, description, region, issue=issue,
                   solution=solution, tracking_number=tracking, remark=remark)
    except DiagnosisError as e:
        _fail(e.message)


@main.command()
@click.option("-q", "--query", default="", help="搜索产品、故障问题、物流单号")
@click.option(
    "--range", "time_range",
    type=click.Choice(["all", "day", "week", "month", "year"]),
    default="all",
    help="时间范围",
)
@click.option("--date", "selected_date", type=DATE_TYPE, default=None, help="日期 YYYY-MM-DD（--range day 时使用）")
@click.pass_context
def history(ctx, query, time_range, selected_date):
    """诊断历史"""
    _make_cli(ctx).history(query, time_range, _to_date(selected_date))


@main.command()
@click.argument("diagnosis_id")
@click.pass_context
def show(ctx, diagnosis_id):
    """查看诊断详情"""
    try:
        _make_cli(ctx).show(diagnosis_id)
    except DiagnosisError as e:
        _fail(e.message)


@main.command()
@click.argument("diagnosis_id")
@click.argument("status", type=click.Choice(["Unprocessed", "Processing", "Processed"]))
@click.pass_context
def status(ctx, diagnosis_id, status):
    """更新售后状态"""
    try:
        _make_cli(ctx).set_status(diagnosis_id, status)
    except DiagnosisError as e:
        _fail(e.message)


@main.command()
@click.argument("diagnosis_id")
@click.argument("text", default="")
@click.pass_context
def remark(ctx, diagnosis_id, text):
    """更新备注（留空则清除）"""
    try:
        _make_cli(ctx).set_remark(diagnosis_id, text)
    except DiagnosisError as e:
        _fail(e.message)


@main.command()
@click.argument("diagnosis_id")
@click.argument("number", default="")
@click.pass_context
def tracking(ctx, diagnosis_id, number):
    """更新物流单号（留空则清除）"""
    try:
        _make_cli(ctx).set_tracking(diagnosis_id, number)
    except DiagnosisError as e:
        _fail(e.message)


@main.command()
@click.argument("diagnosis_id")
@click.argument("actual_result")
@click.pass_context
def verify(ctx, diagnosis_id, actual_result):
    """录入维修后的核实结果"""
    try:
        _make_cli(ctx).verify(diagnosis_id, actual_result)
    except DiagnosisError as e:
        _fail(e.message)


@main.command()
@click.argument("diagnosis_id")
@click.option("--rating", type=click.Choice(["Helpful", "Not Helpful"]), required=True)
@click.option("--comment", default=None)
@click.pass_context
def feedback(ctx, diagnosis_id, rating, comment):
    """评价诊断结果"""
    try:
        _make_cli(ctx).feedback(diagnosis_id, rating, comment)
    except DiagnosisError as e:
        _fail(e.message)


@main.group()
def knowledge():
    """专家知识库"""
    pass


@knowledge.command("list")
@click.option("-q", "--query", default="", help="搜索产品、故障类型、部位")
@click.pass_context
def knowledge_list(ctx, query):
    """列出专家知识"""
    _make_cli(ctx).list_knowledge(query)


@knowledge.command("add")
@click.option("-p", "--product", required=True, help="产品名称")
@click.option("-t", "--fault-type", required=True, help="故障类型")
@click.option("--cause", default="", help="故障原因")
@click.option("--location", default="", help="故障部位")
@click.option("--solution", default="", help="解决方案")
@click.pass_context
def knowledge_add(ctx, product, fault_type, cause, location, solution):
    """新增专家知识（同产品同故障类型则替换）"""
    _make_cli(ctx).add_knowledge(product, fault_type, cause, location, solution)


@knowledge.command("contribute")
@click.argument("diagnosis_id")
@click.option("--cause", default="", help="故障原因")
@click.option("--location", default="", help="故障部位")
@click.option("--solution", default="", help="解决方案（默认取建议措施）")
@click.pass_context
def knowledge_contribute(ctx, diagnosis_id, cause, location, solution):
    """将诊断记录沉淀为专家知识"""
    try:
        _make_cli(ctx).contribute_knowledge(diagnosis_id, cause, location, solution)
    except DiagnosisError as e:
        _fail(e.message)


@knowledge.command("update")
@click.argument("entry_id")
@click.option("-p", "--product", default=None)
@click.option("-t", "--fault-type", default=None)
@click.option("--cause", default=None)
@click.option("--location", default=None)
@click.option("--solution", default=None)
@click.pass_context
def knowledge_update(ctx, entry_id, product, fault_type, cause, location, solution):
    """编辑专家知识"""
    try:
        _make_cli(ctx).update_knowledge(
            entry_id, product_name=product, fault_type=fault_type,
            cause=cause, location=location, solution=solution,
        )
    except DiagnosisError as e:
        _fail(e.message)


@knowledge.command("delete")
@click.argument("entry_id")
@click.confirmation_option(prompt="确定要删除这条专家知识吗？")
@click.pass_context
def knowledge_delete(ctx, entry_id):
    """删除专家知识"""
    try:
        _make_cli(ctx).delete_knowledge(entry_id)
    except DiagnosisError as e:
        _fail(e.message)


@main.command()
@click.option("--date", "selected_date", type=DATE_TYPE, default=None, help="日期 YYYY-MM-DD（默认今天）")
@click.option(
    "-g", "--granularity",
    type=click.Choice(["day", "week", "month", "quarter", "year"]),
    default="month",
    help="时间粒度",
)
@click.option("-c", "--category", default="全部品类", help="品类（默认全部品类）")
@click.pass_context
def stats(ctx, selected_date, granularity, category):
    """看板统计"""
    _make_cli(ctx).stats(_to_date(selected_date), granularity, category)


@main.command("api")
@click.option("--host", default=WebConfig().host, help="服务监听地址")
@click.option("--port", default=WebConfig().port, type=int, help="服务监听端口")
def serve(host: str, port: int):
    """启动 FastAPI 服务"""
    import uvicorn
    from fixwise.api.main import app

    click.echo(f"正在启动服务: http://{host}:{port}")
    click.echo(f"API 文档: http://{host}:{port}/docs")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
