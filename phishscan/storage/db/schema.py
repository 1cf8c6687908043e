"""Database schema creation helpers."""

from __future__ import annotations


class DatabaseSchemaMixin:
    """Database schema creation helpers."""

    async def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        async with self._lock:
            await self._connection.executescript(
                """
                    CREATE TABLE IF NOT EXISTS detection_rules (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        rule_name TEXT NOT NULL,
                        rule_type TEXT NOT NULL,
                        pattern TEXT NOT NULL,
                        severity TEXT DEFAULT 'medium',
                        is_active BOOLEAN DEFAULT TRUE,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    CREATE TABLE IF NOT EXISTS scanned_messages (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        subject TEXT DEFAULT '',
                        sender_email TEXT NOT NULL,
                        sender_name TEXT DEFAULT '',
                        message_content TEXT NOT NULL,
                        risk_score INTEGER DEFAULT 0,
                        is_phishing BOOLEAN DEFAULT FALSE,
                        detection_reasons TEXT DEFAULT '[]',
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    CREATE TABLE IF NOT EXISTS analyzed_links (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        message_id INTEGER NOT NULL,
                        url TEXT NOT NULL,
                        display_text TEXT DEFAULT '',
                        is_suspicious BOOLEAN DEFAULT FALSE,
                        risk_factors TEXT DEFAULT '[]',
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        FOREIGN KEY (message_id) REFERENCES scanned_messages(id) ON DELETE CASCADE
                    );

                    CREATE TABLE IF NOT EXISTS sender_reputation (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        email_address TEXT UNIQUE NOT NULL,
                        total_messages INTEGER DEFAULT 0,
                        phishing_count INTEGER DEFAULT 0,
                        trust_score REAL DEFAULT 50,
                        last_seen TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    CREATE INDEX IF NOT EXISTS idx_rules_active ON detection_rules(is_active);
                    CREATE INDEX IF NOT EXISTS idx_scans_sender ON scanned_messages(sender_email);
                    CREATE INDEX IF NOT EXISTS idx_scans_created ON scanned_messages(created_at);
                    CREATE INDEX IF NOT EXISTS idx_links_message ON analyzed_links(message_id);
                """
            )
            await self._connection.commit()
