#!/usr/bin/env python3
"""Build script for creating standalone executables (GUI app or headless CLI)."""

import argparse
import platform
import shutil
import subprocess
import sys
from pathlib import Path

APP_NAME = "ZohoToObsidian"
CLI_NAME = "zohomigrator"


def get_version() -> str:
    """Extract version from pyproject.toml."""
    project_root = Path(__file__).parent.parent
    pyproject = project_root / "pyproject.toml"

    if pyproject.exists():
        for line in pyproject.read_text().split('\n'):
            if line.startswith('version'):
                return line.split('"')[1]
    return "0.0.0"


def pyinstaller_command(project_root: Path, system: str, onedir: bool, console: bool) -> list:
    """Assemble the PyInstaller invocation for one target."""
    name = CLI_NAME if console else APP_NAME
    entry = "cli.py" if console else "main.py"

    cmd = [
        sys.executable, "-m", "PyInstaller",
        "--name", name,
        "--noconfirm",
        "--onedir" if onedir else "--onefile",
        "--console" if console else "--windowed",
        "--hidden-import", "bs4",
        "--collect-submodules", "zohomigrator",
    ]

    if not console:
        assets_dir = project_root / "assets"
        if assets_dir.exists():
            separator = ";" if system == "windows" else ":"
            cmd.extend(["--add-data", f"assets{separator}assets"])

        icon_path = {
            "windows": assets_dir / "icon.ico",
            "darwin": assets_dir / "icon.icns",
        }.get(system, assets_dir / "icon.png")
        if system == "darwin":
            cmd.extend(["--osx-bundle-identifier", "com.zoho-to-obsidian.converter"])
        if icon_path.exists():
            cmd.extend(["--icon", str(icon_path)])

        cmd.extend([
            "--hidden-import", "customtkinter",
            "--hidden-import", "PIL._tkinter_finder",
            "--hidden-import", "tkinter.filedialog",
            "--hidden-import", "tkinter.messagebox",
            "--collect-all", "customtkinter",
        ])

    cmd.append(str(project_root / "zohomigrator" / entry))
    return cmd


def build(clean: bool = False, onedir: bool = None, console: bool = False) -> int:
    """Build the application for the current platform."""
    system = platform.system().lower()
    project_root = Path(__file__).parent.parent
    version = get_version()

    if clean:
        print("Cleaning build artifacts...")
        for dir_name in [f'build/{APP_NAME}', f'build/{CLI_NAME}', 'dist']:
            dir_path = project_root / dir_name
            if dir_path.exists():
                shutil.rmtree(dir_path)
        for spec_name in (APP_NAME, CLI_NAME):
            spec_file = project_root / f"{spec_name}.spec"
            if spec_file.exists():
                spec_file.unlink()

    if onedir is None:
        # macOS app bundles need a directory build
        onedir = (system == "darwin" and not console)

    cmd = pyinstaller_command(project_root, system, onedir, console)

    print("=" * 60)
    print("Zoho Notebook to Obsidian Converter - Build Script")
    print("=" * 60)
    print(f"Version: {version}")
    print(f"Platform: {system}")
    print(f"Target: {'cli' if console else 'gui'}")
    print(f"Mode: {'onedir' if onedir else 'onefile'}")
    print()

    result = subprocess.run(cmd, cwd=project_root)

    if result.returncode == 0:
        print()
        print("BUILD SUCCESSFUL")
        print(f"Output: {project_root / 'dist'}")
        return 0
    print("BUILD FAILED")
    return 1


def main():
    parser = argparse.ArgumentParser(description="Build Zoho Notebook to Obsidian Converter")
    parser.add_argument("--clean", action="store_true", help="Clean before building")
    parser.add_argument("--onefile", action="store_true", help="Single file mode")
    parser.add_argument("--onedir", action="store_true", help="Directory mode")
    parser.add_argument("--cli", action="store_true", help="Build the headless command line tool")
    args = parser.parse_args()

    onedir = None
    if args.onefile:
        onedir = False
    elif args.onedir:
        onedir = True

    sys.exit(build(clean=args.clean, onedir=onedir, console=args.cli))


if __name__ == "__main__":
    main()
