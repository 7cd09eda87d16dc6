from tictactoe import socketio


def run_sweep(app, registry) -> int:
    """Run one expiry sweep. Errors are logged, never raised."""
    max_age = int(app.config.get('GAME_EXPIRY_SEC', 1800))
    try:
        removed = registry.sweep_expired(max_age)
    except Exception:
        app.logger.exception("[sweep] failed")
        return 0
    if removed:
        app.logger.info(f"[sweep] removed={removed} remaining={len(registry)}")
    return removed


def start_expiry_sweeper(app, registry) -> bool:
    """Start the periodic expiry sweep as a Socket.IO background task.

    - No-ops in TESTING mode unless ENABLE_SWEEPER_IN_TESTS is set
    - Sweeps every SWEEP_INTERVAL_SEC, dropping sessions older than GAME_EXPIRY_SEC
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SWEEPER_IN_TESTS'):
        return False

    interval = int(app.config.get('SWEEP_INTERVAL_SEC', 300))
    if interval <= 0:
        return False

    def _worker():
        app.logger.info(f"[sweep-start] interval={interval}s max_age={app.config.get('GAME_EXPIRY_SEC')}s")
        while True:
            socketio.sleep(interval)
            run_sweep(app, registry)

    socketio.start_background_task(_worker)
    return True
