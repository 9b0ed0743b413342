import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()

# Generation backend
GENERATION_BACKEND = os.getenv("GENERATION_BACKEND", "gemini")

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-3-pro-preview")
THINKING_BUDGET = int(os.getenv("THINKING_BUDGET", "1024"))

# OpenAI-compatible chat completions server
LLM_BASE_URL = os.getenv("LLM_BASE_URL", "http://llama:8001")
LLM_MODEL = os.getenv("LLM_MODEL", "mistral-7b-instruct")
LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.2"))
LLM_REASONING_EFFORT = os.getenv("LLM_REASONING_EFFORT") or None
LLM_TIMEOUT = int(os.getenv("LLM_TIMEOUT", "300"))

# Diagram renderer
DIAGRAM_COMPILER = os.getenv("DIAGRAM_COMPILER", "mmdc")
DIAGRAM_THEME = os.getenv("DIAGRAM_THEME", "dark")
DIAGRAM_FONT_FAMILY = os.getenv("DIAGRAM_FONT_FAMILY", "Inter")
RENDER_TIMEOUT = float(os.getenv("RENDER_TIMEOUT", "30"))

# mermaid-cli (npm @mermaid-js/mermaid-cli)
MMDC_COMMAND = os.getenv("MMDC_COMMAND", "mmdc")
MMDC_PUPPETEER_CONFIG = os.getenv("MMDC_PUPPETEER_CONFIG") or None

# Kroki diagram service
KROKI_URL = os.getenv("KROKI_URL", "https://kroki.io")

# HTTP adapter
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
