"""Built-in pattern tables and package knowledge snapshot.

Hand-curated and versionless. Replace them per run through
``load_knowledge_base`` or by passing custom ``PatternTables``.
"""

from ..schemas.analysis import RiskFactorType, RiskSeverity
from ..schemas.events import PackageManager

# The argument capture stops at shell control operators so that
# "npm install x && npm test" only yields "x".
_ARGS = r"([^;&|\n]+)"

# Blanks within one line; a newline ends the install command.
_WS = r"[^\S\n]+"

# Manager order matters: parse results are concatenated in this order.
INSTALL_PATTERNS: list[tuple[PackageManager, list[str]]] = [
    (
        PackageManager.NPM,
        [
            rf"\bnpm{_WS}install{_WS}(?:--save(?:-dev)?{_WS})?{_ARGS}",
            rf"\bnpm{_WS}i{_WS}(?:--save(?:-dev)?{_WS})?{_ARGS}",
            rf"\byarn{_WS}add{_WS}{_ARGS}",
            rf"\bpnpm{_WS}(?:add|install|i){_WS}{_ARGS}",
            rf"\bbun{_WS}(?:add|install|i){_WS}{_ARGS}",
        ],
    ),
    (
        PackageManager.PIP,
        [
            rf"(?<!uv )\bpip3?{_WS}install{_WS}(?:--break-system-packages{_WS})?{_ARGS}",
            rf"\buv{_WS}pip{_WS}install{_WS}{_ARGS}",
            rf"\buv{_WS}add{_WS}{_ARGS}",
            rf"\bpoetry{_WS}add{_WS}{_ARGS}",
            rf"\bpipx{_WS}install{_WS}{_ARGS}",
        ],
    ),
    (
        PackageManager.CARGO,
        [
            rf"\bcargo{_WS}add{_WS}{_ARGS}",
            rf"\bcargo{_WS}install{_WS}{_ARGS}",
        ],
    ),
    (
        PackageManager.GO,
        [
            rf"\bgo{_WS}get{_WS}{_ARGS}",
            rf"\bgo{_WS}install{_WS}{_ARGS}",
        ],
    ),
    (
        PackageManager.GEM,
        [
            rf"\bgem{_WS}install{_WS}{_ARGS}",
            rf"\bbundle{_WS}add{_WS}{_ARGS}",
        ],
    ),
]

# Flags whose value is the next token ("pip install -r requirements.txt").
VALUE_FLAGS: dict[PackageManager, list[str]] = {
    PackageManager.NPM: ["--registry", "--prefix", "--tag", "-w", "--workspace"],
    PackageManager.PIP: [
        "-r",
        "--requirement",
        "-c",
        "--constraint",
        "-e",
        "--editable",
        "-i",
        "--index-url",
        "--extra-index-url",
        "-f",
        "--find-links",
        "-t",
        "--target",
        "--python",
    ],
    PackageManager.CARGO: [
        "--git",
        "--path",
        "--branch",
        "--tag",
        "--rev",
        "-F",
        "--features",
        "--registry",
        "--root",
    ],
    PackageManager.GO: [],
    PackageManager.GEM: ["-v", "--version", "-i", "--install-dir", "-s", "--source"],
}

PROACTIVE_SEARCH_PATTERNS: list[str] = [
    r"best\s+.+\s+(?:library|package|module|tool)",
    r"(?:alternative|replacement)\s+(?:to|for)\s+",
    r"\bvs\b",
    r"compare\s+",
    r"lightweight\s+",
]

# Agent instruction files written by humans (USER_DIRECTED evidence).
INSTRUCTION_FILES: list[str] = [
    "CLAUDE.md",
    "AGENTS.md",
    "GEMINI.md",
    ".cursorrules",
    ".cursorignore",
    ".windsurfrules",
    ".github/copilot-instructions.md",
]

# Dependency manifests (CONTEXT_INHERITANCE evidence).
MANIFEST_FILES: list[str] = [
    "package.json",
    "requirements.txt",
    "Pipfile",
    "pyproject.toml",
    "Cargo.toml",
    "go.mod",
    "Gemfile",
]

ALTERNATIVE_TOKEN_PATTERN = r"\b([a-z][a-z0-9-]*(?:/[a-z][a-z0-9-]*)?)\b"

STOP_WORDS: list[str] = [
    "the",
    "and",
    "for",
    "with",
    "this",
    "that",
    "from",
    "results",
    "stars",
    "last",
    "commit",
    "weeks",
    "days",
    "ago",
]

# Packages agents reach for by default.
HIGH_TRAINING_WEIGHT_PACKAGES: dict[PackageManager, list[str]] = {
    PackageManager.NPM: [
        "express", "react", "next", "axios", "lodash", "moment",
        "jsonwebtoken", "bcrypt", "mongoose", "cors", "dotenv",
        "body-parser", "nodemon", "jest", "typescript", "webpack",
        "puppeteer", "cheerio", "socket.io", "multer", "passport",
        "sequelize", "pg", "redis", "uuid", "chalk",
        "helmet", "morgan", "express-rate-limit", "express-validator",
    ],
    PackageManager.PIP: [
        "flask", "django", "requests", "pandas", "numpy",
        "beautifulsoup4", "sqlalchemy", "click", "pytest",
        "fastapi", "celery", "redis", "pillow", "scipy",
        "matplotlib", "scikit-learn", "boto3", "pydantic",
    ],
    PackageManager.CARGO: [
        "serde", "tokio", "clap", "reqwest", "anyhow",
        "thiserror", "tracing", "axum", "sqlx",
    ],
    PackageManager.GO: [
        "gin-gonic/gin", "gorilla/mux", "gorm.io/gorm",
        "go-chi/chi", "cobra", "viper",
    ],
    PackageManager.GEM: [
        "rails", "sinatra", "puma", "sidekiq", "rspec",
        "devise", "pg", "redis",
    ],
}

KNOWN_ISSUES: dict[str, dict[str, object]] = {
    "moment": {
        "type": RiskFactorType.DEPRECATED,
        "severity": RiskSeverity.WARNING,
        "detail": (
            "Moment.js is in maintenance mode. Agents still recommend it "
            "due to high training weight."
        ),
        "suggested_alternative": "date-fns or dayjs",
    },
    "request": {
        "type": RiskFactorType.DEPRECATED,
        "severity": RiskSeverity.WARNING,
        "detail": "Request is fully deprecated since Feb 2020.",
        "suggested_alternative": "node-fetch or undici",
    },
    "lodash": {
        "type": RiskFactorType.BLOAT,
        "severity": RiskSeverity.INFO,
        "detail": "Full lodash is 72KB min+gzip. Most projects use <5 functions.",
        "suggested_alternative": "lodash-es (tree-shakeable) or individual lodash packages",
    },
    "axios": {
        "type": RiskFactorType.BLOAT,
        "severity": RiskSeverity.INFO,
        "detail": (
            "Native fetch is available in Node 18+. Axios adds an unnecessary "
            "dependency for simple HTTP calls."
        ),
        "suggested_alternative": "Native fetch API",
    },
    "jsonwebtoken": {
        "type": RiskFactorType.VULNERABILITY,
        "severity": RiskSeverity.ERROR,
        "detail": "CVE-2024-33663: algorithm confusion vulnerability.",
        "source": "https://nvd.nist.gov/vuln/detail/CVE-2024-33663",
        "suggested_alternative": "jose",
    },
    "puppeteer": {
        "type": RiskFactorType.BLOAT,
        "severity": RiskSeverity.WARNING,
        "detail": (
            "Downloads a Chromium binary (~280MB). Often unnecessary for "
            "PDF or scraping tasks."
        ),
        "suggested_alternative": "playwright (smaller) or pdfkit (for PDF generation)",
    },
    "body-parser": {
        "type": RiskFactorType.DEPRECATED,
        "severity": RiskSeverity.INFO,
        "detail": "body-parser is built into Express 4.16+. Separate install is unnecessary.",
        "suggested_alternative": "express.json() and express.urlencoded()",
    },
}

# Technology names humans write in instruction files, per package.
DIRECTIVE_ALIASES: dict[str, list[str]] = {
    "pg": ["postgres", "postgresql"],
    "psycopg": ["postgres", "postgresql"],
    "psycopg2": ["postgres", "postgresql"],
    "psycopg2-binary": ["postgres", "postgresql"],
    "mysql2": ["mysql"],
    "mongoose": ["mongodb", "mongo"],
    "mongodb": ["mongo"],
    "ioredis": ["redis"],
    "better-sqlite3": ["sqlite"],
}
