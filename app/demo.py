"""
No-Guess Minesweeper - Interactive Demo

Run with: streamlit run app/demo.py
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import streamlit as st
from typing import Optional, Set, Tuple

from noguess import (
    DIFFICULTY_PRESETS,
    MAX_COLS,
    MAX_ROWS,
    Board,
    ConfigError,
    DeterministicSolver,
    DifficultyConfig,
    NoGuessSearch,
    NotFoundError,
    generate_board_with_start_cell,
)

SPINNER = "|/-\\"


def render_board_html(
    board: Board,
    deduced_mines: Optional[Set[Tuple[int, int]]] = None,
    show_bombs: bool = False,
) -> str:
    """Render the board as HTML with styling."""
    # Scale cell size based on board width
    if board.cols >= 30:
        cell_size = 14
        font_size = "10px"
    elif board.cols >= 25:
        cell_size = 16
        font_size = "11px"
    elif board.cols >= 16:
        cell_size = 20
        font_size = "13px"
    else:
        cell_size = 26
        font_size = "15px"

    colors = {
        "0": "#cccccc",
        "1": "#0000ff",
        "2": "#008000",
        "3": "#ff0000",
        "4": "#000080",
        "5": "#800000",
        "6": "#008080",
        "7": "#000000",
        "8": "#808080",
    }
    deduced_mines = deduced_mines or set()

    html = '<div style="font-family: monospace; line-height: 1.2;">'
    html += '<table style="border-collapse: collapse; margin: auto;">'

    for r in range(board.rows):
        html += "<tr>"
        for c in range(board.cols):
            cell = board.cell(r, c)

            if cell.revealed and cell.is_bomb:
                text = "M"  # Hit mine
                bg = "#ff0000"
                text_color = "#ffffff"
            elif cell.revealed:
                text = str(cell.value)
                bg = "#f0f0f0" if cell.value == 0 else "#ffffff"
                text_color = colors.get(text, "#000000")
            elif cell.flagged:
                text = "F"
                bg = "#ffa500"
                text_color = "#ffffff"
            elif show_bombs and cell.is_bomb:
                text = "M"
                bg = "#ffcccc" if (r, c) not in deduced_mines else "#ffa500"
                text_color = "#ff0000"
            elif board.start_cell == (r, c):
                text = "S"
                bg = "#90ee90"
                text_color = "#006400"
            else:
                text = "."
                bg = "#c0c0c0"
                text_color = "#666666"

            display = text if text != "0" else " "
            html += f'''<td style="
                width: {cell_size}px; height: {cell_size}px;
                text-align: center;
                background: {bg};
                border: 1px solid #999;
                color: {text_color};
                font-weight: bold;
                font-size: {font_size};
            ">{display}</td>'''
        html += "</tr>"

    html += "</table></div>"
    return html


def run_search(config: DifficultyConfig, tries: int, max_component_size: int) -> Tuple[Optional[Board], int]:
    """Run a background search while animating a progress bar."""
    progress_bar = st.progress(0.0, text="Generating no-guess board ..")
    attempt = 0
    tick = 0

    # A rerun interrupts this loop; leaving the block cancels the worker.
    with NoGuessSearch(config, tries, max_component_size) as search:
        while not search.join(0.05):
            counts = search.progress()
            if counts:
                attempt = counts[-1]
            tick += 1
            progress_bar.progress(
                min(attempt / tries, 1.0),
                text=f"Generating no-guess board {SPINNER[tick % len(SPINNER)]}  Attempt: {attempt:4d}/{tries}",
            )
        counts = search.progress()
        if counts:
            attempt = counts[-1]
        try:
            board = search.result()
        except NotFoundError as exc:
            attempt = exc.attempts
            board = None

    progress_bar.empty()
    return board, attempt


def main():
    st.set_page_config(
        page_title="No-Guess Minesweeper",
        page_icon="💣",
        layout="wide",
    )

    st.title("No-Guess Minesweeper")
    st.markdown("""
    Boards certified solvable by pure deduction from the marked start cell.
    """)

    # Sidebar configuration
    st.sidebar.header("Board Configuration")

    preset = st.sidebar.selectbox(
        "Difficulty Preset",
        [f"{name.capitalize()} ({cfg.rows}x{cfg.cols}, {cfg.bomb_count})" for name, cfg in DIFFICULTY_PRESETS.items()]
        + ["Custom"],
    )

    if preset == "Custom":
        rows = st.sidebar.slider("Rows", 3, MAX_ROWS, 16)
        cols = st.sidebar.slider("Cols", 3, min(MAX_COLS, 60), 16)
        bombs = st.sidebar.slider("Bombs", 1, rows * cols - 1, min(40, rows * cols - 1))
        config = DifficultyConfig(rows, cols, bombs)
    else:
        config = DIFFICULTY_PRESETS[preset.split(" ")[0].lower()]

    tries = st.sidebar.number_input("Tries", min_value=1, max_value=100_000, value=1000, step=100)
    max_component_size = st.sidebar.slider(
        "Max Component Size",
        1,
        22,
        18,
        help="Largest constraint component solved by exhaustive enumeration. "
             "Larger values certify more boards but cost exponentially more time.",
    )

    # Initialize session state
    if "board" not in st.session_state:
        st.session_state.board = None
        st.session_state.certified = None
        st.session_state.attempts = 0
        st.session_state.stats = None
        st.session_state.deduced_mines = set()

    btn_col1, btn_col2 = st.columns(2)
    with btn_col1:
        generate_ng = st.button("Generate No-Guess Board", type="primary")
    with btn_col2:
        generate_plain = st.button("Generate Plain Board")

    board: Optional[Board] = None
    if generate_ng or generate_plain:
        try:
            if generate_ng:
                board, attempts = run_search(config, int(tries), max_component_size)
                certified = board is not None
                if board is None:
                    st.warning("Failed to generate a no-guess board. Falling back to a regular board ..")
                    board = generate_board_with_start_cell(config)
            else:
                board = generate_board_with_start_cell(config)
                attempts, certified = 0, False
        except ConfigError as exc:
            st.error(str(exc))
        else:
            solver = DeterministicSolver(board, max_component_size)
            result = solver.solve()
            st.session_state.board = board
            st.session_state.certified = certified
            st.session_state.attempts = attempts
            st.session_state.stats = dict(solver.stats(), solvable=result.solvable)
            st.session_state.deduced_mines = result.flagged
            st.rerun()

    board = st.session_state.board
    if board is None:
        st.info("Click 'Generate No-Guess Board' to search for a certified board.")
        return

    board_col, stats_col = st.columns([3, 1])

    with board_col:
        st.subheader("Board")

        with st.form("move"):
            mcol1, mcol2, mcol3 = st.columns(3)
            with mcol1:
                row = st.number_input("Row", 0, board.rows - 1, board.start_cell[0] if board.start_cell else 0)
            with mcol2:
                col = st.number_input("Col", 0, board.cols - 1, board.start_cell[1] if board.start_cell else 0)
            with mcol3:
                action = st.radio("Action", ["Reveal", "Flag"], horizontal=True)
            if st.form_submit_button("Play"):
                if action == "Reveal":
                    board.reveal(int(row), int(col), user_click=True)
                else:
                    board.flag(int(row), int(col))

        show_bombs = board.is_game_over or st.checkbox("Show bombs (orange = deduced by solver)")
        st.markdown(
            render_board_html(board, st.session_state.deduced_mines, show_bombs=show_bombs),
            unsafe_allow_html=True,
        )

        if board.is_game_over:
            if board.is_won:
                st.success("You win! All safe cells revealed.")
            else:
                st.error("You lose! Hit a mine.")

    with stats_col:
        st.subheader("Certification")
        if st.session_state.certified:
            st.metric("Result", "No-guess")
            st.metric("Attempts", st.session_state.attempts)
        else:
            st.metric("Result", "Uncertified")

        stats = st.session_state.stats
        if stats:
            st.markdown("---")
            st.markdown("**Solver Statistics**")
            st.text(f"Solvable: {stats['solvable']}")
            st.text(f"Rounds: {stats['rounds_count']}")
            st.text(f"Trivial inferences: {stats['inferred_trivial_count']}")
            st.text(f"Enumeration inferences: {stats['inferred_enumeration_count']}")
            st.text(
                f"Components: {stats['evaluated_components_count']} evaluated, "
                f"{stats['skipped_components_count']} skipped"
            )
            st.text(f"Largest component: {stats['max_component_len']}")


if __name__ == "__main__":
    main()
