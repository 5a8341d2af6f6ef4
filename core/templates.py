"""
Configuration templates written into detected projects.

Each project kind has a VS Code settings table and a list of recommended
extensions, both built on a shared common base. The remaining builders return
fresh documents (tsconfig.json, package.json, ESLint, CI pipelines) with
caller overrides applied on top of sensible defaults. Every builder returns a
new object so callers can modify the result freely.
"""

from typing import Any, Final, Mapping, Optional

from models import Extension, ExtensionRecommendations


def _extensions(*marketplace_ids: str) -> list[Extension]:
    return [{"marketplace_id": m} for m in marketplace_ids]


COMMON_SETTINGS: Final[Mapping[str, Any]] = {
    "editor.fontFamily": "CascadianCode NF",
    "explorer.openEditors.visible": 0,
    "terminal.integrated.fontFamily": "CascadianCode NF",
    "editor.formatOnSave": True,
    "git.autofetch": True,
}

DENO_SETTINGS: Final[Mapping[str, Any]] = {
    **COMMON_SETTINGS,
    "deno.autoFmtOnSave": True,
    "deno.enable": True,
    "deno.unstable": True,
    "deno.lint": True,
    "[typescript]": {"editor.defaultFormatter": "denoland.vscode-deno"},
    "[typescriptreact]": {"editor.defaultFormatter": "denoland.vscode-deno"},
}

NODE_SETTINGS: Final[Mapping[str, Any]] = {**COMMON_SETTINGS}

PYTHON_SETTINGS: Final[Mapping[str, Any]] = {
    **COMMON_SETTINGS,
    "terminal.integrated.shell.linux": "/bin/zsh",
    "python.formatting.provider": "black",
    "python.formatting.blackArgs": ["--line-length", "100"],
    "python.linting.enabled": True,
    "python.linting.pylintEnabled": False,
    "python.linting.mypyEnabled": True,
    "python.linting.lintOnSave": True,
}

_PRETTIER = {"editor.defaultFormatter": "esbenp.prettier-vscode"}

REACT_SETTINGS: Final[Mapping[str, Any]] = {
    **COMMON_SETTINGS,
    "typescript.tsdk": "node_modules/typescript/lib",
    "workbench.iconTheme": "vscode-icons",
    "[typescript]": {**_PRETTIER, "editor.tabSize": 2},
    "typescript.updateImportsOnFileMove.enabled": "always",
    "javascript.updateImportsOnFileMove.enabled": "always",
    "vsicons.projectDetection.autoReload": True,
    "[typescriptreact]": dict(_PRETTIER),
    "[javascript]": dict(_PRETTIER),
    "[json]": dict(_PRETTIER),
    "[html]": dict(_PRETTIER),
    "jest.autoEnable": False,
    "jest.runAllTestsFirst": False,
}

COMMON_EXTENSIONS: Final = _extensions(
    "christian-kohler.path-intellisense",
    "coenraads.bracket-pair-colorizer-2",
    "shd101wyy.markdown-preview-enhanced",
    "visualstudioexptteam.vscodeintellicode",
    "quicktype.quicktype",
    "axetroy.vscode-changelog-generator",
    "humao.rest-client",
)

DENO_EXTENSIONS: Final = [*COMMON_EXTENSIONS, *_extensions("denoland.vscode-deno")]

NODE_EXTENSIONS: Final = [*COMMON_EXTENSIONS, *_extensions("dbaeumer.vscode-eslint")]

HUGO_EXTENSIONS: Final = [
    *COMMON_EXTENSIONS,
    *_extensions(
        "rusnasonov.vscode-hugo",
        "eliostruyf.vscode-hugo-themer",
        "akmittal.hugofy",
        "budparr.language-hugo-vscode",
        "ms-edgedevtools.vscode-edge-devtools",
    ),
]

PYTHON_EXTENSIONS: Final = [
    *COMMON_EXTENSIONS,
    *_extensions(
        "ms-python.python",
        "ms-python.vscode-pylance",
        "mechatroner.rainbow-csv",
        "esbenp.prettier-vscode",
        "eamodio.gitlens",
        "bungcip.better-toml",
    ),
]

REACT_EXTENSIONS: Final = [
    *COMMON_EXTENSIONS,
    *_extensions(
        "dbaeumer.vscode-eslint",
        "esbenp.prettier-vscode",
        "msjsdiag.debugger-for-chrome",
        "vscode-icons-team.vscode-icons",
        "Orta.vscode-jest",
        "eg2.vscode-npm-script",
        "jpoissonnier.vscode-styled-components",
    ),
]

# Pre-commit hook bodies, without the interpreter line.
DENO_GIT_PRE_COMMIT_SCRIPT: Final = "deno lint --unstable && deno fmt --check"
PYTHON_GIT_PRE_COMMIT_SCRIPT: Final = 'find . -type f -name "*.py" | xargs pylint'
NODE_GIT_PRE_COMMIT_SCRIPT: Final = "npx eslint . && npx tsc --noEmit"

NODE_ESLINT_IGNORE_DIRS: Final = ("node_modules", "dist", "coverage")


def ext_recommendations(extensions: list[Extension]) -> ExtensionRecommendations:
    """Convert extensions into the `.vscode/extensions.json` document."""
    return {"recommendations": [e["marketplace_id"] for e in extensions]}


def ts_config(overrides: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
    """
    Build a `tsconfig.json` document.

    Only `compilerOptions.outDir`, `compilerOptions.target` and
    `compilerOptions.module` are taken from `overrides`; every other option is
    fixed.
    """
    compiler_overrides = (overrides or {}).get("compilerOptions") or {}
    return {
        "compilerOptions": {
            "outDir": compiler_overrides.get("outDir", "dist"),
            "declaration": True,
            "sourceMap": True,
            "target": compiler_overrides.get("target", "es6"),
            "lib": ["dom", "dom.iterable", "esnext"],
            "allowJs": True,
            "skipLibCheck": True,
            "esModuleInterop": True,
            "allowSyntheticDefaultImports": True,
            "strict": True,
            "alwaysStrict": True,
            "noImplicitAny": True,
            "forceConsistentCasingInFileNames": True,
            "module": compiler_overrides.get("module", "umd"),
            "moduleResolution": "node",
            "resolveJsonModule": False,
            "isolatedModules": True,
            "noEmit": False,
            "jsx": "preserve",
            "typeRoots": ["./node_modules/@types"],
            "emitDecoratorMetadata": True,
            "experimentalDecorators": True,
        },
        "include": ["**/*.ts"],
        "exclude": ["**/node_modules", "dist", "**/.*/"],
    }


def node_package_config(name: str, version: str = "0.1.0") -> dict[str, Any]:
    """Build a minimal `package.json` for a TypeScript Node package."""
    return {
        "name": name,
        "version": version,
        "main": "dist/index.js",
        "types": "dist/index.d.ts",
        "scripts": {
            "build": "tsc",
            "lint": "eslint . --ext .ts",
            "test": "jest",
            "prepublishOnly": "npm run build",
        },
        "devDependencies": {
            "@typescript-eslint/eslint-plugin": "^4.0.0",
            "@typescript-eslint/parser": "^4.0.0",
            "eslint": "^7.0.0",
            "typescript": "^4.0.0",
        },
    }


def node_eslint_settings() -> dict[str, Any]:
    """Build an `.eslintrc` document for TypeScript sources."""
    return {
        "root": True,
        "parser": "@typescript-eslint/parser",
        "plugins": ["@typescript-eslint"],
        "extends": [
            "eslint:recommended",
            "plugin:@typescript-eslint/recommended",
        ],
        "env": {"node": True, "es6": True},
    }


def github_actions_config(
    name: Optional[str] = None,
    on: Optional[Mapping[str, Any]] = None,
    jobs: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """
    Build a GitHub Actions workflow document; defaults run Deno lint, fmt and tests.
    """
    return {
        "name": name or "Deno",
        "on": dict(on)
        if on
        else {
            "push": {"branches": "main"},
            "pull_request": {"branches": "main"},
        },
        "jobs": dict(jobs)
        if jobs
        else {
            "test": {
                "runs-on": "ubuntu-latest",
                "strategy": {"matrix": {"deno": ["v1.x", "nightly"]}},
                "steps": [
                    {"name": "Setup repo", "uses": "actions/checkout@v2"},
                    {
                        "name": "Install Deno and execute unit testing",
                        "run": (
                            "curl -fsSL https://deno.land/x/install/install.sh | sh && "
                            "export PATH=$PATH:/home/runner/.deno/bin; deno --version; "
                            "deno info; deno lint --unstable && deno fmt --unstable && "
                            "deno test -A --unstable;"
                        ),
                    },
                ],
            }
        },
    }


def gitlab_ci_config(
    cicd_config_properties: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Build a `.gitlab-ci.yml` document; defaults run Deno lint, fmt and tests."""
    if cicd_config_properties:
        return dict(cicd_config_properties)
    return {
        "stages": ["testing"],
        "DenoTest": {
            "image": {"name": "hayd/deno:latest"},
            "stage": "testing",
            "script": [
                "deno --version",
                "deno info",
                "deno lint --unstable",
                "deno fmt --unstable",
                "deno test -A --unstable",
            ],
        },
    }


# Settings tables that `configctl inspect template` can print.
TEMPLATES: Final[Mapping[str, tuple[Mapping[str, Any], list[Extension]]]] = {
    "deno": (DENO_SETTINGS, DENO_EXTENSIONS),
    "node": (NODE_SETTINGS, NODE_EXTENSIONS),
    "python": (PYTHON_SETTINGS, PYTHON_EXTENSIONS),
    "react": (REACT_SETTINGS, REACT_EXTENSIONS),
    "hugo": (COMMON_SETTINGS, HUGO_EXTENSIONS),
}
