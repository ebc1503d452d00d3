"""
Test cases for the CLI module (cli.py)
"""

import json
import tempfile
from unittest.mock import patch, MagicMock

import pytest
import numpy as np

from cli import (
    load_data,
    to_dissimilarities,
    describe_matrix,
    train_command,
    inspect_command,
    main,
)

MATRIX = [
    [0.0, 0.1, 5.0, 5.0],
    [0.1, 0.0, 5.0, 5.0],
    [5.0, 5.0, 0.0, 0.1],
    [5.0, 5.0, 0.1, 0.0],
]


@pytest.fixture
def sample_csv_file():
    """Create a temporary CSV file holding a dissimilarity matrix"""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False) as f:
        for row in MATRIX:
            f.write(",".join(str(value) for value in row) + "\n")
        return f.name


@pytest.fixture
def sample_json_file():
    """Create a temporary JSON file for testing"""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        json.dump(MATRIX, f)
        return f.name


@pytest.fixture
def sample_npy_file():
    """Create a temporary NPY file for testing"""
    with tempfile.NamedTemporaryFile(suffix=".npy", delete=False) as f:
        np.save(f.name, np.array(MATRIX, dtype=np.float32))
        return f.name


@pytest.fixture
def sample_npz_file():
    """Create a temporary NPZ file for testing"""
    with tempfile.NamedTemporaryFile(suffix=".npz", delete=False) as f:
        np.savez(f.name, dissimilarities=np.array(MATRIX))
        return f.name


@pytest.fixture
def features_csv_file():
    """Create a temporary CSV file holding feature vectors"""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False) as f:
        f.write("0.0,0.0\n0.1,0.0\n0.0,0.1\n5.0,5.0\n5.1,5.0\n5.0,5.1\n")
        return f.name


@pytest.mark.cli
@pytest.mark.io
class TestLoadData:
    """Tests for load_data function"""

    def test_load_csv_file(self, sample_csv_file):
        """Test loading CSV file"""
        data = load_data(sample_csv_file)
        assert isinstance(data, np.ndarray)
        assert data.shape == (4, 4)
        assert data.dtype == np.float64

    def test_load_csv_explicit_format(self, sample_csv_file):
        """Test loading CSV with explicit format"""
        data = load_data(sample_csv_file, "csv")
        np.testing.assert_array_equal(data, MATRIX)

    def test_load_json_file(self, sample_json_file):
        """Test loading JSON file"""
        data = load_data(sample_json_file)
        assert data.shape == (4, 4)
        assert data.dtype == np.float64

    def test_load_npy_file(self, sample_npy_file):
        """Test loading NPY file"""
        data = load_data(sample_npy_file)
        assert data.shape == (4, 4)
        assert data.dtype == np.float64

    def test_load_npz_file(self, sample_npz_file):
        """Test loading NPZ file"""
        data = load_data(sample_npz_file)
        np.testing.assert_array_equal(data, MATRIX)

    def test_load_nonexistent_file(self):
        """Test loading nonexistent file"""
        with pytest.raises(FileNotFoundError):
            load_data("nonexistent.csv")

    def test_load_unsupported_format(self, sample_csv_file):
        """Test loading with unsupported format"""
        with pytest.raises(ValueError, match="Unsupported format"):
            load_data(sample_csv_file, "txt")

    def test_load_invalid_csv(self):
        """Test loading invalid CSV file"""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False) as f:
            f.write("invalid,csv,content\nno,numbers,here")
        with pytest.raises(ValueError, match="Failed to load data"):
            load_data(f.name)

    def test_load_invalid_json(self):
        """Test loading invalid JSON file"""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            f.write("{invalid json}")
        with pytest.raises(ValueError):
            load_data(f.name)


@pytest.mark.cli
@pytest.mark.unit
class TestMatrixHelpers:
    """Tests for dissimilarity helpers"""

    def test_to_dissimilarities(self):
        features = np.array([[0.0, 0.0], [3.0, 4.0]])
        np.testing.assert_allclose(
            to_dissimilarities(features), [[0.0, 25.0], [25.0, 0.0]]
        )

    def test_describe_square_matrix(self):
        summary = describe_matrix(np.array(MATRIX))
        assert summary["shape"] == [4, 4]
        assert summary["square"] is True
        assert summary["symmetric"] is True
        assert summary["zero_diagonal"] is True
        assert summary["max"] == 5.0

    def test_describe_rectangular_matrix(self):
        summary = describe_matrix(np.ones((2, 3)))
        assert summary["square"] is False
        assert summary["symmetric"] is False


@pytest.mark.cli
@pytest.mark.unit
class TestTrainCommand:
    """Tests for train_command function"""

    @pytest.fixture
    def train_args(self, sample_csv_file, tmp_path):
        """Create mock args for training"""
        args = MagicMock()
        args.input = sample_csv_file
        args.format = "auto"
        args.features = False
        args.prototypes = 2
        args.iterations = 20
        args.lambda_ = None
        args.neighborhood = "exact"
        args.seed = 42
        args.log = True
        args.verbose = False
        args.output = str(tmp_path / "result.json")
        return args

    def test_train_command_success(self, train_args):
        """Test successful training command"""
        with patch("builtins.print") as mock_print:
            train_command(train_args)

            print_calls = [call[0][0] for call in mock_print.call_args_list]
            assert any("Training completed!" in call for call in print_calls)

        with open(train_args.output) as f:
            results = json.load(f)

        assignments = results["assignments"]
        assert assignments[0] == assignments[1]
        assert assignments[2] == assignments[3]
        assert assignments[0] != assignments[2]
        assert len(results["logged_quantization_error"]) == 20
        assert len(results["lambdas"]) == 20
        assert results["info"]["iterations"] == 20

    def test_train_command_from_features(self, train_args, features_csv_file):
        """Test training on feature vectors"""
        train_args.input = features_csv_file
        train_args.features = True
        train_args.log = False

        with patch("builtins.print"):
            train_command(train_args)

        with open(train_args.output) as f:
            results = json.load(f)
        assert len(results["assignments"]) == 6
        assert results["logged_quantization_error"] == []

    def test_train_command_data_loading_error(self, train_args):
        """Test training command with data loading error"""
        with patch("cli.load_data", side_effect=ValueError("Load failed")):
            with patch("sys.exit") as mock_exit:
                with patch("builtins.print"):
                    train_command(train_args)
                    mock_exit.assert_called_with(1)

    def test_train_command_one_dimensional_input(self, train_args):
        """Test training command with a vector instead of a matrix"""
        with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
            json.dump([0.0, 1.0, 2.0], f)
        train_args.input = f.name

        with patch("sys.exit") as mock_exit:
            with patch("builtins.print") as mock_print:
                train_command(train_args)
                mock_exit.assert_called_with(1)
                print_calls = [str(call[0][0]) for call in mock_print.call_args_list]
                assert any("2D matrix" in call for call in print_calls)

    def test_train_command_invalid_parameters(self, train_args):
        """Test training command with more prototypes than objects"""
        train_args.prototypes = 10

        with patch("sys.exit") as mock_exit:
            with patch("builtins.print"):
                train_command(train_args)
                mock_exit.assert_called_with(1)


@pytest.mark.cli
@pytest.mark.unit
class TestInspectCommand:
    """Tests for inspect_command function"""

    def test_inspect_command(self, sample_csv_file):
        args = MagicMock()
        args.input = sample_csv_file
        args.format = "auto"

        with patch("builtins.print") as mock_print:
            inspect_command(args)
            print_calls = [str(call[0][0]) for call in mock_print.call_args_list]
            assert "square: True" in print_calls
            assert "symmetric: True" in print_calls

    def test_inspect_command_missing_file(self):
        args = MagicMock()
        args.input = "missing.npy"
        args.format = "auto"

        with patch("sys.exit") as mock_exit:
            with patch("builtins.print"):
                inspect_command(args)
                mock_exit.assert_called_with(1)


@pytest.mark.cli
@pytest.mark.unit
class TestMain:
    """Tests for the argument parser entry point"""

    def test_version(self):
        with patch("sys.argv", ["cli.py", "version"]):
            with patch("builtins.print") as mock_print:
                main()
                mock_print.assert_called_with("Relational Neural Gas CLI v0.1.0")

    def test_no_command(self):
        with patch("sys.argv", ["cli.py"]):
            with pytest.raises(SystemExit):
                main()

    def test_train_dispatch(self, sample_csv_file, tmp_path):
        output = tmp_path / "out.json"
        argv = ["cli.py", "train", sample_csv_file, "-k", "2", "--seed", "1",
                "--iterations", "5", "--output", str(output)]
        with patch("sys.argv", argv):
            with patch("builtins.print"):
                main()
        assert output.exists()
