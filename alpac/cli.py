"""
CLI 模块

命令行接口实现。错误在这里转换为退出码，核心库不会直接退出进程。
"""

import asyncio
from pathlib import Path
from typing import List, Optional, Union

import click
from loguru import logger

from alpac import __version__
from alpac.config import FetchSettings
from alpac.download import DefaultTransport, Fetcher, FetchManager
from alpac.exceptions import AlpacError
from alpac.logger import setup_logger
from alpac.models import Recipe, VersionRequest
from alpac.recipe_loader import load_recipe


def parse_version_request(recipe: Recipe, value: str) -> Union[VersionRequest, str]:
    """
    把命令行参数转换为版本请求

    "latest" 只有在配方中没有同名版本时才表示最新版本。
    """
    if value == VersionRequest.LATEST.value and value not in recipe.sources:
        return VersionRequest.LATEST
    return value


def print_versions(recipe: Recipe) -> None:
    """按从新到旧的顺序打印可用版本"""
    versions = recipe.sorted_versions(descending=True)
    if not versions:
        click.echo("This recipe does not define any versions.")
        return
    click.echo("Available versions are:")
    for version in versions:
        click.echo(f"  - {version}")


async def run_async(
    recipe: Recipe,
    version: str,
    out_dir: str,
    fetch_all: bool,
    settings: FetchSettings,
) -> List[Path]:
    """异步运行"""
    async with DefaultTransport(settings) as transport:
        fetcher = Fetcher(transport=transport, settings=settings)
        if not fetch_all:
            descriptor = recipe.resolve(parse_version_request(recipe, version))
            return [await fetcher.download_to_dir(descriptor, out_dir)]

        manager = FetchManager(fetcher)
        outcomes = await manager.fetch_all(recipe.all_descriptors(), out_dir)
        stats = manager.get_stats()
        logger.info(
            f"[统计] 共 {stats.total} 个, 成功 {stats.completed} 个, 失败 {stats.failed} 个"
        )
        failed = [o for o in outcomes if not o.ok]
        if failed:
            # 返回第一个错误，调用方据此决定退出码
            raise failed[0].error
        return [o.path for o in outcomes]


@click.command()
@click.option(
    "-d",
    "--recipe-dir",
    type=click.Path(exists=True),
    required=True,
    help="Directory (or file) that contains the recipe",
)
@click.option(
    "-r",
    "--recipe-version",
    default="latest",
    show_default=True,
    help="Which version of the recipe to fetch",
)
@click.option(
    "-o", "--out", "out_dir", default=".", show_default=True, help="Output directory"
)
@click.option("--all", "fetch_all", is_flag=True, help="Fetch every source in the recipe")
@click.option("--list-versions", is_flag=True, help="List available versions and exit")
@click.option("--concurrency", type=click.IntRange(min=1), help="Maximum parallel downloads")
@click.option("--retries", type=click.IntRange(min=0), help="Retries on transport failure")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("-q", "--quiet", is_flag=True, help="Only log warnings and errors")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Also write a full log to this file")
@click.version_option(version=__version__)
def main(
    recipe_dir: str,
    recipe_version: str,
    out_dir: str,
    fetch_all: bool,
    list_versions: bool,
    concurrency: Optional[int],
    retries: Optional[int],
    debug: bool,
    quiet: bool,
    log_file: Optional[str],
):
    """Alpac - fetch and verify artifacts described by a recipe"""
    setup_logger(debug=debug, quiet=quiet, log_file=log_file)

    try:
        recipe = load_recipe(recipe_dir)
        if list_versions:
            print_versions(recipe)
            return

        settings = FetchSettings.from_env().with_overrides(
            max_concurrent=concurrency, max_retries=retries
        )
        paths = asyncio.run(
            run_async(recipe, recipe_version, out_dir, fetch_all, settings)
        )
    except AlpacError as e:
        logger.error(f"[错误] {e}")
        raise click.ClickException(str(e))

    for path in paths:
        click.echo(f"File was successfully downloaded to `{path.name}`.")


if __name__ == "__main__":
    main()
