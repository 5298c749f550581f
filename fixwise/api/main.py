"""FastAPI 主应用"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fixwise.api.diagnosis import router as diagnosis_router
from fixwise.api.knowledge import router as knowledge_router
from fixwise.api.stats import router as stats_router

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

app = FastAPI(
    title="产品售后故障诊断助手 API",
    description="基于历史案例与专家知识的 AI 故障诊断与售后跟踪",
    version="0.1.0",
)

# 配置 CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 生产环境应该限制具体域名
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(diagnosis_router, prefix="/api", tags=["diagnosis"])
app.include_router(knowledge_router, prefix="/api", tags=["knowledge"])
app.include_router(stats_router, prefix="/api", tags=["stats"])


@app.get("/")
async def root():
    """根路径"""
    return {
        "message": "产品售后故障诊断助手 API",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """健康检查"""
    return {"status": "ok"}
