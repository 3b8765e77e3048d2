"""Subset of the Telegram Bot API update objects used by the bot."""
from pydantic import BaseModel, ConfigDict, Field


class _TelegramModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TelegramUser(_TelegramModel):
    id: int
    is_bot: bool = False
    first_name: str = ""
    last_name: str | None = None
    username: str | None = None

    @property
    def display_name(self) -> str:
        return self.username or self.first_name or "Unknown"


class Chat(_TelegramModel):
    id: int
    type: str = "private"


class Message(_TelegramModel):
    message_id: int
    chat: Chat
    from_user: TelegramUser | None = Field(default=None, alias="from")
    text: str | None = None
    date: int | None = None


class CallbackQuery(_TelegramModel):
    id: str
    from_user: TelegramUser = Field(alias="from")
    message: Message | None = None
    data: str | None = None


class Update(_TelegramModel):
    update_id: int
    message: Message | None = None
    callback_query: CallbackQuery | None = None


class InlineButton(_TelegramModel):
    text: str
    callback_data: str


class InlineKeyboard(_TelegramModel):
    inline_keyboard: list[list[InlineButton]] = Field(default_factory=list)
