#!/usr/bin/env python3
"""
set_system_ssh_key.py - 사용자 시스템 SSH 키 기록 스크립트

외부 키 생성기가 만든 키 파일을 읽어 users/<username>.json에 기록:
- public 키: 필수 (GET /{username}/ssh-key/system 으로 노출)
- private 키: 선택 (저장만 하고 API로 노출하지 않음)

사용법:
    # 기본 실행 (dry-run)
    uv run python scripts/set_system_ssh_key.py alice --public-key id_rsa.pub

    # 실제 기록
    uv run python scripts/set_system_ssh_key.py alice --public-key id_rsa.pub --private-key id_rsa --execute
"""

import argparse
import logging
from pathlib import Path

from src.app.main import load_config, resolve_users_root
from src.core.user_store import UserStore, validate_name
from src.domain.errors import ExtendError

# 로깅 설정
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def read_key_file(path: Path) -> str:
    """키 파일 읽기 (앞뒤 공백 제거)."""
    return path.read_text(encoding="utf-8").strip()


def set_system_key(
    store: UserStore,
    username: str,
    public_key_path: Path,
    private_key_path: Path | None = None,
    execute: bool = False,
) -> bool:
    """
    시스템 SSH 키 기록.

    Returns:
        기록(또는 dry-run 검증) 성공 여부
    """
    try:
        validate_name(username, "username")
    except ExtendError as e:
        logger.error(f"잘못된 사용자 이름: {e}")
        return False

    if not public_key_path.exists():
        logger.error(f"public 키 파일 없음: {public_key_path}")
        return False
    public = read_key_file(public_key_path)
    if not public:
        logger.error(f"public 키 파일이 비어 있음: {public_key_path}")
        return False

    private = None
    if private_key_path is not None:
        if not private_key_path.exists():
            logger.error(f"private 키 파일 없음: {private_key_path}")
            return False
        private = read_key_file(private_key_path)

    if not execute:
        logger.info(f"[DRY-RUN] '{username}' 시스템 키 기록 예정: {public_key_path}")
        return True

    store.set_system_ssh_key(username, public, private=private)
    logger.info(f"'{username}' 시스템 키 기록 완료")
    return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="사용자 시스템 SSH 키 기록 스크립트",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("username", help="대상 사용자 이름")
    parser.add_argument(
        "--public-key",
        type=Path,
        required=True,
        help="public 키 파일 경로",
    )
    parser.add_argument(
        "--private-key",
        type=Path,
        help="private 키 파일 경로 (선택)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="설정 파일 경로 (기본: 프로젝트 루트 default.yaml)",
    )
    parser.add_argument(
        "--execute",
        action="store_true",
        help="실제 기록 실행 (기본: dry-run)",
    )

    args = parser.parse_args(argv)

    config = load_config(args.config)
    store = UserStore(
        resolve_users_root(config),
        lock_timeout=config.get("store", {}).get("lock_timeout"),
    )

    if not args.execute:
        logger.info("DRY-RUN 모드 (실제 기록 없음), 실제 실행: --execute 옵션 추가")

    ok = set_system_key(
        store,
        args.username,
        args.public_key,
        private_key_path=args.private_key,
        execute=args.execute,
    )
    return 0 if ok else 1


if __name__ == "__main__":
    exit(main())
