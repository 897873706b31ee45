# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Main entry point for the resumectl CLI.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from resumectl import github, linkedin
from resumectl.config import SUPPORTED_LANGS, Settings, set_ca_bundle_override
from resumectl.errors import FileNotFound, InvalidColor, NoConverterAvailable, ResumectlError
from resumectl.generator import ResumeGenerator
from resumectl.models import Resume, empty_resume
from resumectl.pdf import INSTALL_HINTS
from resumectl.preview import STYLES, resume_to_markdown, show
from resumectl.server import DEFAULT_PORT, LivePreviewServer
from resumectl.store import load_resume, save_resume
from resumectl.themes import list_themes, theme_names, validate_hex_color, validate_theme

__version__ = "1.0.0"

logger = logging.getLogger(__name__)

GITHUB_PLACEHOLDER = "github.com/yourusername"


def setup_logging(verbosity: int, quiet: bool = False, log_file: Optional[str] = None):
    """
    Configures logging:
    - Console (rich): Default=INFO, -q=ERROR, -v=DEBUG
    - File (optional): always DEBUG
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Re-entrant: drop handlers from a previous call in the same process
    for handler in list(root.handlers):
        if getattr(handler, "_resumectl", False):
            root.removeHandler(handler)
            handler.close()

    if quiet:
        level = logging.ERROR
    elif verbosity >= 1:
        level = logging.DEBUG
    else:
        level = logging.INFO

    console_handler = RichHandler(console=Console(stderr=True), show_path=False, show_time=verbosity >= 1)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    console_handler._resumectl = True
    root.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
        file_handler._resumectl = True
        root.addHandler(file_handler)

    # Silence some noisy libs if not debugging
    if level > logging.DEBUG:
        logging.getLogger("urllib3").setLevel(logging.WARNING)


def _require_data_file(settings: Settings) -> Path:
    path = Path(settings.data_path)
    if not path.is_file():
        raise FileNotFound(path)
    return path


def cmd_generate(args, settings: Settings) -> int:
    data_path = _require_data_file(settings)
    generator = ResumeGenerator.from_file(data_path, theme=settings.theme, color=settings.color,
                                          lang=settings.lang)

    output_dir = Path(settings.output_dir)
    html_path = output_dir / "cv.html"
    pdf_path = output_dir / "cv.pdf"

    # --pdf still needs the intermediate HTML
    logger.info("Generating HTML...")
    generator.generate_html(html_path)

    if not args.html:
        logger.info("Generating PDF...")
        try:
            generator.generate_pdf(html_path, pdf_path)
        except NoConverterAvailable as e:
            logger.error(f"Error generating PDF: {e}")
            for hint in INSTALL_HINTS:
                logger.info(hint)
            return 1

    logger.info("Generation completed successfully")
    return 0


def cmd_show(args, settings: Settings) -> int:
    resume = load_resume(_require_data_file(settings))
    show(resume_to_markdown(resume, settings.lang), style=args.style, pager=args.pager, inline=args.inline)
    return 0


def cmd_validate(args, settings: Settings) -> int:
    data_path = Path(settings.data_path)
    logger.info(f"Validating file: {data_path}")
    resume = load_resume(_require_data_file(settings))
    validate_theme(settings.theme)
    if not validate_hex_color(settings.color):
        raise InvalidColor(settings.color)

    logger.info("YAML file is valid")
    logger.info(
        f"CV summary: name={resume.personal.full_name!r} title={resume.personal.title!r} "
        f"email={resume.personal.email!r} experiences={len(resume.experience)} "
        f"education={len(resume.education)} skills={len(resume.skills)} "
        f"languages={len(resume.languages)} certifications={len(resume.certifications)} "
        f"projects={len(resume.projects)}"
    )
    return 0


def cmd_themes(args, settings: Settings) -> int:
    print("Available themes for resumectl:")
    print()
    for name, description, is_default in list_themes():
        marker = "*" if is_default else " "
        print(f"  {marker} {name:<10}  {description}")
    print()
    print("  * = default theme")
    print()
    print("Usage:")
    print("  resumectl generate --theme <name>")
    return 0


def _import_linkedin(identifier: str, cookie: Optional[str]) -> Optional[Resume]:
    logger.info("Fetching LinkedIn profile...")
    if cookie:
        logger.info("Using authenticated session for full data access...")
    try:
        profile = linkedin.fetch_profile(identifier, session_cookie=cookie, log=logger)
    except ResumectlError as e:
        logger.warning(f"Could not fetch LinkedIn profile, creating template instead: {e}")
        return None

    logger.info(f"Profile found: {profile.first_name} {profile.last_name}".rstrip())
    if cookie:
        logger.info("Full profile data retrieved successfully!")
    else:
        logger.warning("LinkedIn limits public data access. Some information may be missing or incomplete.")
        logger.info("To get ALL data, use: --cookie <your_li_at_cookie> (or set LINKEDIN_COOKIE)")
        logger.info("  1. Log in to LinkedIn in your browser")
        logger.info("  2. Open DevTools (F12) > Application > Cookies > linkedin.com")
        logger.info("  3. Copy the value of 'li_at' cookie")
    if "linkedin.com" not in identifier:
        identifier = f"linkedin.com/in/{linkedin.extract_username(identifier)}"
    return profile.to_resume(identifier)


def _apply_github_profile(resume: Resume, profile: github.GitHubProfile) -> None:
    """Replaces the starter placeholders with what the GitHub account exposes."""
    personal = resume.personal
    if profile.name:
        first, _, last = profile.name.partition(" ")
        personal.first_name, personal.last_name = first, last
    if profile.bio:
        resume.summary = profile.bio
    if profile.location:
        personal.location = profile.location
    if profile.email:
        personal.email = profile.email
    if profile.blog:
        personal.website = profile.blog


def _import_github(identifier: str, count: int, resume: Resume, linkedin_imported: bool) -> None:
    logger.info("Fetching GitHub projects...")
    username = github.extract_username(identifier)
    logger.info(f"Looking up GitHub profile: {username}")

    try:
        ranked = github.fetch_top_projects(username, count, log=logger)
    except ResumectlError as e:
        logger.warning(f"Could not fetch GitHub projects: {e}")
        return

    logger.info(f"GitHub projects fetched successfully! (count={len(ranked)})")
    resume.projects.extend(item.project for item in ranked)
    if not resume.personal.github or resume.personal.github == GITHUB_PLACEHOLDER:
        resume.personal.github = f"github.com/{username}"

    if not linkedin_imported:
        try:
            _apply_github_profile(resume, github.fetch_profile(username, log=logger))
        except ResumectlError as e:
            logger.warning(f"Could not fetch GitHub profile: {e}")


def cmd_init(args, settings: Settings) -> int:
    target = Path(args.file)
    if target.exists() and not args.force:
        logger.error(f"File already exists. Use --force to overwrite: {target}")
        return 1

    resume = None
    if args.linkedin:
        resume = _import_linkedin(args.linkedin, args.cookie or settings.linkedin_cookie)
    linkedin_imported = resume is not None
    if resume is None:
        resume = empty_resume()

    if args.github:
        _import_github(args.github, args.projects, resume, linkedin_imported)

    save_resume(resume, target)
    logger.info(f"CV file created successfully! {target.resolve()}")
    logger.info("Next steps:")
    logger.info(f"  1. Edit the file with your information: {target}")
    logger.info("  2. Generate your CV: resumectl generate")
    logger.info("  3. Preview in browser: resumectl serve")
    return 0


def cmd_serve(args, settings: Settings) -> int:
    data_path = _require_data_file(settings)
    server = LivePreviewServer(data_path, settings.output_dir, theme=settings.theme,
                               color=settings.color, lang=settings.lang, log=logger)
    server.serve_forever(args.port)
    return 0


def cmd_version(args, settings: Settings) -> int:
    print(f"resumectl version {__version__}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    # Global options are accepted before or after the subcommand
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-d", "--data", default=argparse.SUPPRESS, help="Path to the CV YAML file (default: cv.yaml)")
    common.add_argument("-o", "--output", default=argparse.SUPPRESS, help="Output directory (default: output)")
    common.add_argument("--theme", default=argparse.SUPPRESS, help=f"CV theme ({theme_names()})")
    common.add_argument("--color", default=argparse.SUPPRESS, help="Custom primary color for any theme (hex, e.g. #ff5733)")
    common.add_argument("--lang", choices=SUPPORTED_LANGS, default=argparse.SUPPRESS, help="Language of section titles and dates")
    common.add_argument("-v", "--verbose", action="count", default=argparse.SUPPRESS, help="Debug output")
    common.add_argument("-q", "--quiet", action="store_true", default=argparse.SUPPRESS, help="Suppress status output (ERROR only)")
    common.add_argument("--ca-bundle", default=argparse.SUPPRESS, help="Path to a custom CA certificate bundle for HTTPS verification (proxy environments)")
    common.add_argument("--log-file", default=argparse.SUPPRESS, help="Also write DEBUG logs to this file")

    parser = argparse.ArgumentParser(prog="resumectl", description="HTML and PDF resume generator from a YAML file",
                                     parents=[common])
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    p = sub.add_parser("generate", parents=[common], help="Generate the CV in HTML and PDF")
    fmt = p.add_mutually_exclusive_group()
    fmt.add_argument("--html", action="store_true", help="Generate HTML only")
    fmt.add_argument("--pdf", action="store_true", help="Generate PDF only")
    p.set_defaults(func=cmd_generate)

    p = sub.add_parser("show", parents=[common], help="Display CV in the terminal")
    p.add_argument("-s", "--style", default="auto", choices=STYLES, help="Display style")
    p.add_argument("-p", "--pager", action="store_true", help="Page the output")
    p.add_argument("--inline", action="store_true", help="Render inline with rich even if glow is installed")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("validate", parents=[common], help="Validate the CV YAML file")
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("themes", parents=[common], help="List available themes")
    p.set_defaults(func=cmd_themes)

    p = sub.add_parser("init", parents=[common], help="Initialize a new CV YAML file")
    p.add_argument("-l", "--linkedin", help="LinkedIn profile URL or username")
    p.add_argument("-c", "--cookie", help="LinkedIn session cookie (li_at) for full data access")
    p.add_argument("-f", "--file", default="cv.yaml", help="Output file name")
    p.add_argument("--force", action="store_true", help="Overwrite existing file")
    p.add_argument("-g", "--github", help="GitHub username to fetch top projects")
    p.add_argument("-p", "--projects", type=int, default=5, help="Number of top GitHub projects to fetch (default: 5)")
    p.set_defaults(func=cmd_init)

    p = sub.add_parser("serve", parents=[common], help="Start a live preview server")
    p.add_argument("-p", "--port", type=int, default=DEFAULT_PORT, help="Server port")
    p.set_defaults(func=cmd_serve)

    p = sub.add_parser("version", parents=[common], help="Print the version")
    p.set_defaults(func=cmd_version)

    return parser


def main(argv=None):
    try:
        sys.exit(_main_cli(argv))
    except KeyboardInterrupt:
        # Use stderr so it captures attention even if stdout is redirected
        sys.stderr.write("\n\033[31m[-] Cancelled by user\033[0m\n")
        sys.exit(130)


def _main_cli(argv=None) -> int:
    args = build_parser().parse_args(argv)

    settings = Settings.from_env().override(
        data_path=getattr(args, "data", None),
        output_dir=getattr(args, "output", None),
        theme=getattr(args, "theme", None),
        color=getattr(args, "color", None),
        lang=getattr(args, "lang", None),
        log_file=getattr(args, "log_file", None),
        ca_bundle=getattr(args, "ca_bundle", None),
    )
    setup_logging(getattr(args, "verbose", 0), quiet=getattr(args, "quiet", False), log_file=settings.log_file)

    if getattr(args, "ca_bundle", None):
        set_ca_bundle_override(settings.ca_bundle)

    try:
        return args.func(args, settings)
    except ResumectlError as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    main()
