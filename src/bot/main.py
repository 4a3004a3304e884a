"""
Главный файл запуска Telegram бота.

Отвечает за:
1. Инициализацию Bot и Dispatcher.
2. Настройку логирования и Sentry.
3. Регистрацию зависимостей (реестр сессий профиля).
4. Подключение роутеров (Handlers).
5. Запуск процесса Polling.
"""

import asyncio

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from src.bot.core.config import settings
from src.bot.handlers import common, profile
from src.bot.services.session_registry import ProfileSessionRegistry
from src.core_shared.logging_setup import setup_logger
from src.core_shared.sentry_sdk_setup import setup_sentry

# Настраиваем логгер
log = setup_logger("BotMain", log_level_override=settings.LOG_LEVEL)


def create_dispatcher(sessions: ProfileSessionRegistry) -> Dispatcher:
    """
    Создает диспетчер с подключенными роутерами и зависимостями.

    Args:
        sessions (ProfileSessionRegistry): Реестр сессий профиля.

    Returns:
        Dispatcher: Настроенный диспетчер.
    """
    dp = Dispatcher()

    # Любой хендлер может запросить аргумент `sessions` и получить этот экземпляр
    dp["sessions"] = sessions

    # Порядок важен! Общие команды (/cancel, /signin) должны срабатывать из любого состояния.
    dp.include_router(common.router)
    dp.include_router(profile.router)

    return dp


async def main():
    """Асинхронная точка входа."""
    log.info("🚀 Запуск Telegram бота...")

    setup_sentry(settings, log_level=settings.LOG_LEVEL)

    # parse_mode=ParseMode.HTML позволяет использовать HTML теги в сообщениях (<b>, <i>, <a href>)
    bot = Bot(token=settings.BOT_TOKEN, default=DefaultBotProperties(parse_mode=ParseMode.HTML))

    sessions = ProfileSessionRegistry()
    dp = create_dispatcher(sessions)

    try:
        # Удаляем вебхук и очищаем очередь обновлений, накопившихся пока бот спал
        await bot.delete_webhook(drop_pending_updates=True)

        log.info("Бот запущен и готов к работе (Polling mode).")
        await dp.start_polling(bot)

    except Exception as e:
        log.exception(f"Критическая ошибка при работе бота: {e}")

    finally:
        log.info("Остановка бота...")

        # Закрываем HTTP-клиенты сессий профиля и сессию бота
        await sessions.close()
        await bot.session.close()

        log.info("Бот остановлен.")


def run() -> None:
    """Синхронная точка входа (консольный скрипт profile-editor-bot)."""
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        # Обработка Ctrl+C в терминале
        log.info("Бот остановлен вручную.")


if __name__ == "__main__":
    run()
