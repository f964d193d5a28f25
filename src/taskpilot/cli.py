"""
CLI entry point.

Commands:
- init: Initialize data directory
- config show | config set <provider> <model> [api_key] [base_url]
  [--temperature T] [--max-tokens N]
- prompt show | prompt set <text> | prompt reset
- generate <text>: Generate tasks with the LLM and add them to the board
- test [--prompt <text>] <text>: Show raw LLM output and token usage
- board: Print board columns
- add <text>: Quick todo from a voice transcript
- move <task_id> <source> <destination>: Move a task between columns
- edit <task_id> [--title <text>] [--description <text>]: Edit a task
- delete <task_id>: Delete a task

Flags:
- --debug: Enable debug logging (console and file)
"""

import asyncio
import logging
import sys

from taskpilot.board.service import BoardService
from taskpilot.board.store import SQLiteTaskStore, TaskNotFoundError
from taskpilot.core.config import Settings, get_settings
from taskpilot.core.logging import get_logger, setup_logging
from taskpilot.generation.service import TaskGenerator
from taskpilot.llm.base import ProviderConfig, ProviderType
from taskpilot.llm.client import ProviderClient
from taskpilot.llm.errors import LLMError
from taskpilot.settings.store import SettingsStore

USAGE = """Usage: taskpilot [--debug] <command> [args]
Commands:
  init
  config show
  config set <provider> <model> [api_key] [base_url] [--temperature T] [--max-tokens N]
  prompt show | prompt set <text> | prompt reset
  generate <text>
  test [--prompt <text>] <text>
  board
  add <text>
  move <task_id> <source> <destination>
  edit <task_id> [--title <text>] [--description <text>]
  delete <task_id>
Columns: todo, in-progress, done, archived"""


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = list(sys.argv[1:] if argv is None else argv)
    settings = get_settings()

    debug_mode = "--debug" in args
    if debug_mode:
        args.remove("--debug")

    log_level = logging.DEBUG if debug_mode else logging.INFO
    setup_logging(level=log_level, log_file=settings.log_path, console=debug_mode)
    logger = get_logger("cli")

    if not args:
        print(USAGE)
        return 1

    command, rest = args[0], args[1:]

    if command == "init":
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Initialized data directory: {settings.data_dir}")
        print(f"Created: {settings.data_dir}")
        return 0

    if command == "config":
        return _config_command(settings, rest)

    if command == "prompt":
        return _prompt_command(settings, rest)

    if command in ("generate", "test", "board", "add", "move", "edit", "delete"):
        try:
            return asyncio.run(_board_command(settings, command, rest))
        except (LLMError, TaskNotFoundError, ValueError) as e:
            logger.error(f"{command} failed: {e}")
            print(f"Error: {e}")
            return 1

    print(f"Unknown command: {command}")
    print(USAGE)
    return 1


def _config_command(settings: Settings, args: list[str]) -> int:
    """Show or save the provider configuration."""
    store = SettingsStore(settings.settings_path)

    if not args or args[0] == "show":
        config = store.load_provider_config()
        if config is None:
            print("LLM not configured. Run: taskpilot config set <provider> <model> [api_key]")
            return 1
        print(f"provider:    {config.provider_name}")
        print(f"model:       {config.model}")
        print(f"api_key:     {_mask(config.api_key)}")
        if config.base_url:
            print(f"base_url:    {config.base_url}")
        print(f"temperature: {config.effective_temperature}")
        print(f"max_tokens:  {config.effective_max_tokens}")
        if not store.is_configured(config):
            print("Warning: configuration incomplete")
        return 0

    if args[0] == "set":
        try:
            temperature = _pop_option(args, "--temperature")
            max_tokens = _pop_option(args, "--max-tokens")
            temperature = float(temperature) if temperature is not None else None
            max_tokens = int(max_tokens) if max_tokens is not None else None
        except ValueError as e:
            print(f"Error: {e}")
            return 1
        if len(args) < 3:
            print(USAGE)
            return 1

        # Re-running set keeps saved tuning unless overridden
        saved = store.load_provider_config()
        if saved is not None:
            if temperature is None:
                temperature = saved.temperature
            if max_tokens is None:
                max_tokens = saved.max_tokens

        provider, model = args[1], args[2]
        api_key = args[3] if len(args) > 3 else settings.api_key
        base_url = args[4] if len(args) > 4 else None

        if not api_key:
            print("Error: API key required (argument or TASKPILOT_API_KEY)")
            return 1
        if provider not in {p.value for p in ProviderType}:
            print(f"Error: unknown provider {provider!r}")
            return 1
        if provider == ProviderType.CUSTOM.value and not base_url:
            print("Error: custom provider needs a base_url")
            return 1

        store.save_provider_config(
            ProviderConfig(
                provider=provider,
                api_key=api_key,
                model=model,
                base_url=base_url,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        )
        print("LLM configuration saved.")
        return 0

    print(USAGE)
    return 1


def _prompt_command(settings: Settings, args: list[str]) -> int:
    """Show, replace or reset the system prompt."""
    store = SettingsStore(settings.settings_path)
    generator = TaskGenerator(ProviderClient())
    store.initialize(generator.client, generator)

    if not args or args[0] == "show":
        print(generator.get_system_prompt())
        return 0

    if args[0] == "set" and len(args) > 1:
        store.save_system_prompt(" ".join(args[1:]))
        print("System prompt saved.")
        return 0

    if args[0] == "reset":
        store.reset_system_prompt()
        print("System prompt reset to default.")
        return 0

    print(USAGE)
    return 1


async def _board_command(settings: Settings, command: str, args: list[str]) -> int:
    """Run a command that needs the task store or the LLM."""
    prompt_override = _pop_option(args, "--prompt") if command == "test" else None
    title = _pop_option(args, "--title") if command == "edit" else None
    description = _pop_option(args, "--description") if command == "edit" else None
    text = " ".join(args).strip()

    client = ProviderClient(timeout=settings.request_timeout)
    generator = TaskGenerator(client)
    SettingsStore(settings.settings_path).initialize(client, generator)

    store = SQLiteTaskStore(settings.db_path)
    await store.connect()
    board = BoardService(store, generator)

    try:
        if command in ("generate", "test", "add") and not text:
            print("Error: input text required")
            return 1

        if command in ("generate", "test") and client.get_config() is None:
            print("Error: LLM not configured. Run: taskpilot config set ...")
            return 1

        if command == "generate":
            tasks = await board.add_generated(text)
            print(f"Added {len(tasks)} task(s):")
            for task in tasks:
                print(f"  [{task.status.value}] {task.title}  ({task.id})")
            return 0

        if command == "test":
            result = await generator.test_prompt(text, system_prompt=prompt_override)
            print(result.response)
            print("-" * 40)
            usage = result.usage
            print(
                f"tokens: {usage.prompt_tokens} prompt, "
                f"{usage.completion_tokens} completion, {usage.total_tokens} total"
            )
            return 0

        if command == "board":
            for column in await board.columns():
                print(f"{column.title} ({len(column.tasks)})")
                for task in column.tasks:
                    print(f"  {task.id}  {task.title}")
            return 0

        if command == "add":
            task = await board.add_from_transcript(text)
            print(f"Added: {task.title}  ({task.id})")
            return 0

        if command == "move":
            if len(args) != 3:
                print(USAGE)
                return 1
            task = await board.move_task(args[0], args[1], args[2])
            print("Moved." if task else "Nothing to move.")
            return 0

        if command == "edit":
            if len(args) != 1 or (title is None and description is None):
                print(USAGE)
                return 1
            task = await board.update_task(args[0], title=title, description=description)
            print(f"Updated: {task.title}  ({task.id})")
            return 0

        if command == "delete":
            if len(args) != 1:
                print(USAGE)
                return 1
            await board.delete_task(args[0])
            print("Deleted.")
            return 0

        return 1
    finally:
        await client.close()
        await store.close()


def _pop_option(args: list[str], name: str) -> str | None:
    """Remove `name value` from args and return the value."""
    if name not in args:
        return None
    index = args.index(name)
    if index + 1 >= len(args):
        raise ValueError(f"{name} needs a value")
    value = args[index + 1]
    del args[index : index + 2]
    return value


def _mask(secret: str) -> str:
    if len(secret) <= 8:
        return "*" * len(secret)
    return f"{secret[:4]}...{secret[-4:]}"


if __name__ == "__main__":
    sys.exit(main())
