# Database schema definitions

# Sub-second timestamps keep the feed ordering stable for posts created in the same second
NOW_MS = "(strftime('%Y-%m-%d %H:%M:%f', 'now'))"

USERS_TABLE_SCHEMA = f'''
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT UNIQUE NOT NULL,
        password_hash TEXT NOT NULL,
        bio TEXT,
        phone TEXT,
        birth_date TEXT,
        location TEXT,
        avatar_path TEXT,
        is_admin BOOLEAN DEFAULT 0,
        created_at TIMESTAMP DEFAULT {NOW_MS}
    )
'''

POSTS_TABLE_SCHEMA = f'''
    CREATE TABLE IF NOT EXISTS posts (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER NOT NULL,
        content TEXT NOT NULL DEFAULT '',
        image_path TEXT,
        like_count INTEGER DEFAULT 0,
        comment_count INTEGER DEFAULT 0,
        active BOOLEAN DEFAULT 1,
        created_at TIMESTAMP DEFAULT {NOW_MS},
        FOREIGN KEY (user_id) REFERENCES users (id)
    )
'''

COMMENTS_TABLE_SCHEMA = f'''
    CREATE TABLE IF NOT EXISTS comments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        post_id INTEGER NOT NULL,
        user_id INTEGER NOT NULL,
        content TEXT NOT NULL,
        active BOOLEAN DEFAULT 1,
        created_at TIMESTAMP DEFAULT {NOW_MS},
        FOREIGN KEY (post_id) REFERENCES posts (id),
        FOREIGN KEY (user_id) REFERENCES users (id)
    )
'''

LIKES_TABLE_SCHEMA = f'''
    CREATE TABLE IF NOT EXISTS likes (
        post_id INTEGER NOT NULL,
        user_id INTEGER NOT NULL,
        created_at TIMESTAMP DEFAULT {NOW_MS},
        PRIMARY KEY (post_id, user_id),
        FOREIGN KEY (post_id) REFERENCES posts (id),
        FOREIGN KEY (user_id) REFERENCES users (id)
    )
'''

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_posts_feed ON posts (active, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_posts_user ON posts (user_id, active)",
    "CREATE INDEX IF NOT EXISTS idx_comments_post ON comments (post_id, active, created_at)",
]

ALL_SCHEMAS = [
    USERS_TABLE_SCHEMA,
    POSTS_TABLE_SCHEMA,
    COMMENTS_TABLE_SCHEMA,
    LIKES_TABLE_SCHEMA,
] + INDEXES
