# Inbound event names (clients -> core)
LOBBY_JOIN = "lobby:join"
ROOM_CREATE = "room:create"
ROOM_JOIN = "room:join"
ROOM_LEAVE = "room:leave"
GAME_START = "game:start"
CHAT_SEND = "chat:send"
DRAW_STROKE = "draw:stroke"
DRAW_CLEAR = "draw:clear"
