from block_blast.game import LevelReward
from block_blast.visualization.human_play import _format_timer, reward_lines


def test_timer_format():
    assert _format_timer(0) == "0:00"
    assert _format_timer(75.9) == "1:15"


def test_reward_summary_breaks_down_the_total():
    lines = reward_lines(LevelReward(level=2, base=70, speed_bonus=36, elapsed=47.0))
    assert lines[0] == "Level 2 complete!"
    assert "Level reward: +70 coins" in lines
    assert "Time bonus: +36 coins" in lines
    assert "Time taken: 0:47" in lines
    assert lines[-1].startswith("Total: +106 coins")
