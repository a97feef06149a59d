# run.py

from crm import create_app
import os

# ----------------------------------------------------

# Lee la configuración del entorno o usa 'development' por defecto
config_name = os.environ.get('FLASK_CONFIG', 'development')
app = create_app(config_name)

# ----------------------------------------------------------------

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 4000))
    app.run(debug=True, port=port)
